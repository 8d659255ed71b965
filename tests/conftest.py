"""Pytest configuration and fixtures"""

import os
import sys
from datetime import datetime

import pytest
import yaml

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from focus.errors import ExternalCommandError
from focus.rules import Configuration, DisplayRule, DomainRule, parse_time
from focus.settings import Settings


class FakeDisplay:
    """Display backend that records calls instead of running xrandr"""

    def __init__(self, screens=('eDP-1',)):
        self.screens = list(screens)
        self.calls = []
        self.failing_screens = set()
        self.list_fails = False

    def list_displays(self):
        if self.list_fails:
            raise ExternalCommandError("xrandr not found")
        return list(self.screens)

    def set_grayscale(self, screen, enabled):
        self.calls.append((screen, enabled))
        if screen in self.failing_screens:
            raise ExternalCommandError(f"cannot set {screen}")


def at(hhmm, day=15):
    """A datetime on a fixed day at the given HH:MM"""
    t = parse_time(hhmm)
    return datetime(2024, 3, day, t.hour, t.minute)


def rule(domain, start, end, exception_until=None):
    return DomainRule(domain, parse_time(start), parse_time(end), exception_until)


@pytest.fixture
def fake_display():
    return FakeDisplay()


@pytest.fixture
def sample_config():
    """Two windows for youtube.com, one for reddit.com, one grayscale window"""
    return Configuration(
        rules=[
            rule('youtube.com', '09:00', '12:00'),
            rule('youtube.com', '18:00', '22:00'),
            rule('reddit.com', '22:00', '06:00'),
        ],
        display_rules=[DisplayRule(parse_time('21:00'), parse_time('07:00'))],
    )


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at files inside tmp_path"""
    source = os.path.join(os.path.dirname(__file__), 'test_settings.yaml')
    with open(source) as f:
        data = yaml.safe_load(f)
    data['config_path'] = str(tmp_path / 'config.json')
    data['hosts_path'] = str(tmp_path / 'hosts')

    settings_path = tmp_path / 'settings.yaml'
    with open(settings_path, 'w') as f:
        yaml.safe_dump(data, f)
    return Settings(str(settings_path))


@pytest.fixture
def hosts_path(test_settings):
    with open(test_settings.hosts_path, 'w') as f:
        f.write("127.0.0.1 localhost\n::1 ip6-localhost\n")
    return test_settings.hosts_path
