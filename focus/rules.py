#!/usr/bin/python3
"""
Rule data model for focus.

A Configuration is a plain value: it is loaded by focus.store, handed to the
functions in focus.schedule, and saved again by whoever loaded it.
"""
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional

from focus.errors import ValidationError

TIME_FORMAT = "%H:%M"
DEFAULT_DAILY_LIMIT = 2
# Sentinel for "no exception used yet"
EPOCH_DATE = date(1970, 1, 1)

_TIME_RE = re.compile(r"^\d{1,2}:\d{2}$")
_DOMAIN_RE = re.compile(r"^[a-z0-9-]+(\.[a-z0-9-]+)*$")


@dataclass
class DomainRule:
    """Block `domain` every day between start_time and end_time"""
    domain: str
    start_time: time
    end_time: time
    exception_until: Optional[datetime] = None


@dataclass
class DisplayRule:
    """Force grayscale every day between start_time and end_time"""
    start_time: time
    end_time: time
    enabled: bool = True


@dataclass
class Configuration:
    rules: List[DomainRule] = field(default_factory=list)
    display_rules: List[DisplayRule] = field(default_factory=list)
    manual_display_override: bool = False
    exception_daily_limit: int = DEFAULT_DAILY_LIMIT
    exceptions_used_today: int = 0
    last_exception_date: date = EPOCH_DATE

    def rules_for(self, domain: str) -> List[DomainRule]:
        """All rules for an already normalized domain"""
        return [rule for rule in self.rules if rule.domain == domain]

    def domains(self) -> List[str]:
        return sorted({rule.domain for rule in self.rules})


def parse_time(value: str) -> time:
    """Parse a 24-hour HH:MM string."""
    if not isinstance(value, str) or not _TIME_RE.match(value.strip()):
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    try:
        return datetime.strptime(value.strip(), TIME_FORMAT).time()
    except ValueError:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")


def format_time(value: time) -> str:
    return value.strftime(TIME_FORMAT)


def normalize_domain(raw: str) -> str:
    """
    Canonical form used by every domain-keyed command.

    "YouTube", "https://www.youtube.com/feed" and "youtube.com." all become
    "youtube.com". A bare name without a dot gets ".com" appended.
    """
    if not isinstance(raw, str):
        raise ValidationError(f"Domain must be a string, got {raw!r}")
    domain = raw.strip().lower()
    if "://" in domain:
        domain = domain.split("://", 1)[1]
    domain = domain.split("/", 1)[0].rstrip(".")
    if domain.startswith("www.") and "." in domain[4:]:
        domain = domain[4:]

    if not domain:
        raise ValidationError(f"Invalid domain '{raw}'")
    if "." not in domain:
        domain = f"{domain}.com"
    if not _DOMAIN_RE.match(domain):
        raise ValidationError(f"Invalid domain '{raw}'")
    return domain
