#!/usr/bin/python3
"""
Settings loader for the focus YAML settings file
"""
import os
from typing import Any, Dict, Optional

import yaml

from focus.errors import ValidationError
from focus.hosts import HOSTS_PATH
from focus.store import CONFIG_PATH

SEARCH_PATHS = [
    # System-wide settings location
    "/etc/focus/settings.yaml",
    # Home directory
    os.path.expanduser("~/.focus/settings.yaml"),
    # Current working directory
    "settings.yaml",
]

DEFAULTS = {
    'config_path': CONFIG_PATH,
    'hosts_path': HOSTS_PATH,
    'poll_interval': 10,
    'log_dir': "/var/log/focus",
    'log_level': "INFO",
    'display': {
        'enabled': True,
        'command': "xrandr",
        'env': ":0",
    },
}


class Settings:
    """Where focus keeps its files and how the daemon behaves"""

    def __init__(self, settings_path: str = None):
        if settings_path is None:
            for path in SEARCH_PATHS:
                if os.path.exists(path):
                    settings_path = path
                    break
        elif not os.path.exists(settings_path):
            raise FileNotFoundError(f"Settings file not found: {settings_path}")

        self.path = settings_path
        data = {}
        if settings_path is not None:
            with open(settings_path, 'r') as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ValidationError(f"Invalid YAML in {settings_path}: {e}") from e
            if not isinstance(data, dict):
                raise ValidationError(f"{settings_path} must contain a mapping")

        self.data = self._merge(DEFAULTS, data)
        self._validate()

    @staticmethod
    def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        merged = dict(defaults)
        for key, value in overrides.items():
            if isinstance(merged.get(key), dict) and isinstance(value, dict):
                merged[key] = {**merged[key], **value}
            else:
                merged[key] = value
        return merged

    def _validate(self):
        interval = self.data['poll_interval']
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            raise ValidationError(f"poll_interval must be a positive number, got {interval!r}")
        if not isinstance(self.data['display'], dict):
            raise ValidationError("display must be a mapping")

    @property
    def config_path(self) -> str:
        return os.path.expanduser(self.data['config_path'])

    @property
    def hosts_path(self) -> str:
        return os.path.expanduser(self.data['hosts_path'])

    @property
    def poll_interval(self) -> float:
        return self.data['poll_interval']

    @property
    def log_dir(self) -> Optional[str]:
        log_dir = self.data['log_dir']
        return os.path.expanduser(log_dir) if log_dir else None

    @property
    def log_level(self) -> str:
        return str(self.data['log_level']).upper()

    @property
    def display_enabled(self) -> bool:
        return bool(self.data['display'].get('enabled', True))

    @property
    def display_command(self) -> str:
        return self.data['display'].get('command', "xrandr")

    @property
    def display_env(self) -> str:
        return self.data['display'].get('env', ":0")
