#!/usr/bin/python3
"""
JSON persistence for the focus rules file.
"""
import json
import os
import tempfile
from datetime import date, datetime
from typing import Any, Dict

from focus.errors import PersistenceError, ValidationError
from focus.rules import (
    DEFAULT_DAILY_LIMIT,
    EPOCH_DATE,
    Configuration,
    DisplayRule,
    DomainRule,
    format_time,
    normalize_domain,
    parse_time,
)

CONFIG_PATH = "/etc/focus/config.json"

# Key names used by earlier releases of the rules file
LEGACY_KEYS = {
    'display_rules': 'bw_rules',
    'manual_display_override': 'manual_bw_active',
    'exceptions_used_today': 'exceptions_used_count',
}


def _get(data: Dict[str, Any], key: str, default):
    if key in data:
        return data[key]
    legacy = LEGACY_KEYS.get(key)
    if legacy and legacy in data:
        return data[legacy]
    return default


def _parse_timestamp(value):
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        # Stored with an offset; compare in local wall-clock time
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def config_from_dict(data: Dict[str, Any]) -> Configuration:
    if not isinstance(data, dict):
        raise PersistenceError("Rules file must contain a JSON object")
    try:
        rules = [
            DomainRule(
                domain=normalize_domain(item['domain']),
                start_time=parse_time(item['start_time']),
                end_time=parse_time(item['end_time']),
                exception_until=_parse_timestamp(item.get('exception_until')),
            )
            for item in _get(data, 'rules', [])
        ]
        display_rules = [
            DisplayRule(
                start_time=parse_time(item['start_time']),
                end_time=parse_time(item['end_time']),
                enabled=bool(item.get('enabled', True)),
            )
            for item in _get(data, 'display_rules', [])
        ]
        return Configuration(
            rules=rules,
            display_rules=display_rules,
            manual_display_override=bool(_get(data, 'manual_display_override', False)),
            exception_daily_limit=int(_get(data, 'exception_daily_limit', DEFAULT_DAILY_LIMIT)),
            exceptions_used_today=int(_get(data, 'exceptions_used_today', 0)),
            last_exception_date=date.fromisoformat(
                _get(data, 'last_exception_date', EPOCH_DATE.isoformat())
            ),
        )
    except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
        raise PersistenceError(f"Invalid rules file: {e}") from e


def config_to_dict(config: Configuration) -> Dict[str, Any]:
    return {
        'rules': [
            {
                'domain': rule.domain,
                'start_time': format_time(rule.start_time),
                'end_time': format_time(rule.end_time),
                'exception_until': rule.exception_until.isoformat() if rule.exception_until else None,
            }
            for rule in config.rules
        ],
        'display_rules': [
            {
                'start_time': format_time(rule.start_time),
                'end_time': format_time(rule.end_time),
                'enabled': rule.enabled,
            }
            for rule in config.display_rules
        ],
        'manual_display_override': config.manual_display_override,
        'exception_daily_limit': config.exception_daily_limit,
        'exceptions_used_today': config.exceptions_used_today,
        'last_exception_date': config.last_exception_date.isoformat(),
    }


def load_config(path: str = CONFIG_PATH) -> Configuration:
    """Load the rules file; a missing file means an empty configuration."""
    if not os.path.exists(path):
        return Configuration()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PersistenceError(f"Malformed JSON in {path}: {e}") from e
    except OSError as e:
        raise PersistenceError(f"Cannot read {path}: {e}") from e
    return config_from_dict(data)


def save_config(config: Configuration, path: str = CONFIG_PATH):
    """Write the rules file atomically so readers never see half a file."""
    directory = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.config-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(config_to_dict(config), f, indent=2)
                f.write('\n')
            os.replace(tmp_path, path)
        except BaseException:
            os.unlink(tmp_path)
            raise
    except OSError as e:
        raise PersistenceError(f"Cannot write {path}: {e}") from e
