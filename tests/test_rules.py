"""Test parsing and normalization of rule input"""

from datetime import time

import pytest

from focus.errors import ValidationError
from focus.rules import format_time, normalize_domain, parse_time


class TestParseTime:
    def test_valid_times(self):
        assert parse_time('09:00') == time(9, 0)
        assert parse_time('23:59') == time(23, 59)
        assert parse_time('00:00') == time(0, 0)
        assert parse_time(' 7:05 ') == time(7, 5)

    @pytest.mark.parametrize('value', ['24:00', '12:60', '9am', '12', '12:00:00', '', 'ab:cd', None])
    def test_invalid_times(self, value):
        with pytest.raises(ValidationError):
            parse_time(value)

    def test_format_time(self):
        assert format_time(time(7, 5)) == '07:05'


class TestNormalizeDomain:
    """Every domain-keyed command goes through the same normalization"""

    @pytest.mark.parametrize('raw, expected', [
        ('youtube', 'youtube.com'),
        ('youtube.com', 'youtube.com'),
        ('YouTube.COM', 'youtube.com'),
        ('  reddit.com  ', 'reddit.com'),
        ('www.youtube.com', 'youtube.com'),
        ('https://www.youtube.com/feed/trending', 'youtube.com'),
        ('news.ycombinator.com', 'news.ycombinator.com'),
        ('example.org.', 'example.org'),
        ('www.com', 'www.com'),
        ('www.co', 'www.co'),
        ('www', 'www.com'),
    ])
    def test_normalization(self, raw, expected):
        assert normalize_domain(raw) == expected

    @pytest.mark.parametrize('raw', ['', '   ', 'you tube', 'bad_domain.com', 'host:8080', 5, None])
    def test_invalid_domains(self, raw):
        with pytest.raises(ValidationError):
            normalize_domain(raw)
