#!/usr/bin/python3
from setuptools import setup, find_packages

setup(
    name="focus",
    version="1.0.0",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        'test': ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'focus=focus.cli:main',
            'focusd=focus.daemon:main',
        ],
    },
    python_requires=">=3.8",
    description="Time-windowed site blocking and grayscale scheduling via /etc/hosts",
    package_data={
        '': ['*.yaml', '*.yml'],
    },
)
