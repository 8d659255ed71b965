#!/usr/bin/python3
"""
Rule evaluation for focus.

Everything here works on a Configuration value and an explicit "now"; nothing
reads the clock or touches the filesystem, so callers own load/save.
"""
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Union

from focus.errors import NoSuchRule, QuotaExceeded, ValidationError
from focus.rules import (
    Configuration,
    DisplayRule,
    DomainRule,
    normalize_domain,
    parse_time,
)


def in_window(now: Union[time, datetime], start: time, end: time) -> bool:
    """
    Check whether a time of day falls inside [start, end].

    Both ends are inclusive. When start > end the window wraps past midnight,
    e.g. 22:00-06:00 matches 23:30 and 05:00.
    """
    if isinstance(now, datetime):
        now = now.time()
    if start <= end:
        return start <= now <= end
    return now >= start or now <= end


def is_suspended(exception_until: Optional[datetime], now: datetime) -> bool:
    """An exception suspends a block until it expires; no cleanup needed."""
    return exception_until is not None and exception_until > now


def is_blocking(rule: DomainRule, now: datetime) -> bool:
    return in_window(now, rule.start_time, rule.end_time) and not is_suspended(rule.exception_until, now)


def compute_blocked_domains(rules: Iterable[DomainRule], now: datetime) -> List[str]:
    """Domains that must be blocked right now, deduplicated and sorted."""
    return sorted({rule.domain for rule in rules if is_blocking(rule, now)})


def compute_display_target(config: Configuration, now: datetime) -> bool:
    """Whether the display should be grayscale right now."""
    if config.manual_display_override:
        return True
    for rule in config.display_rules:
        if rule.enabled and in_window(now, rule.start_time, rule.end_time):
            return True
    return False


def _reset_quota_if_new_day(config: Configuration, today: date):
    if config.last_exception_date != today:
        config.exceptions_used_today = 0
        config.last_exception_date = today


def remaining_exceptions(config: Configuration, now: datetime) -> int:
    """Grants left today, without mutating config."""
    used = config.exceptions_used_today if config.last_exception_date == now.date() else 0
    return max(config.exception_daily_limit - used, 0)


def consume_exception(config: Configuration, domain: str, minutes: int, now: datetime) -> int:
    """
    Suspend every rule of `domain` for `minutes` minutes.

    One grant counts as a single quota unit no matter how many windows the
    domain has. Returns the number of grants left today.

    Raises:
        QuotaExceeded: daily limit already used up (config untouched)
        NoSuchRule: no rule exists for the domain (quota not consumed)
    """
    if minutes <= 0:
        raise ValidationError(f"Exception duration must be positive, got {minutes}")
    domain = normalize_domain(domain)

    _reset_quota_if_new_day(config, now.date())
    if config.exceptions_used_today >= config.exception_daily_limit:
        raise QuotaExceeded(config.exception_daily_limit)

    matching = config.rules_for(domain)
    if not matching:
        raise NoSuchRule(domain)

    expiry = now + timedelta(minutes=minutes)
    for rule in matching:
        rule.exception_until = expiry
    config.exceptions_used_today += 1

    return config.exception_daily_limit - config.exceptions_used_today


def active_exception(rule: DomainRule, now: datetime) -> Optional[datetime]:
    """Expiry of the rule's exception if it is still running"""
    if is_suspended(rule.exception_until, now):
        return rule.exception_until
    return None


def add_rule(config: Configuration, domain: str, start: str, end: str) -> DomainRule:
    """Append a new block window; a domain may have any number of them."""
    rule = DomainRule(
        domain=normalize_domain(domain),
        start_time=parse_time(start),
        end_time=parse_time(end),
    )
    config.rules.append(rule)
    return rule


def remove_rules(config: Configuration, domain: str) -> List[DomainRule]:
    """Remove every rule for a domain and return the removed rules."""
    domain = normalize_domain(domain)
    removed = config.rules_for(domain)
    if not removed:
        raise NoSuchRule(domain)
    config.rules = [rule for rule in config.rules if rule.domain != domain]
    return removed


def set_exception_limit(config: Configuration, limit: int):
    if limit < 0:
        raise ValidationError(f"Exception limit must not be negative, got {limit}")
    config.exception_daily_limit = limit


def add_display_rule(config: Configuration, start: str, end: str) -> DisplayRule:
    rule = DisplayRule(start_time=parse_time(start), end_time=parse_time(end))
    config.display_rules.append(rule)
    return rule


def set_manual_display(config: Configuration, enabled: bool):
    config.manual_display_override = enabled


def clear_display_rules(config: Configuration):
    """Drop all grayscale windows and switch manual mode off."""
    config.display_rules = []
    config.manual_display_override = False
