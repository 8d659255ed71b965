"""focus - time-windowed site blocking and grayscale scheduling"""

__version__ = "1.0.0"
