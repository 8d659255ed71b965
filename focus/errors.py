#!/usr/bin/python3
"""Exceptions raised by focus"""


class FocusError(Exception):
    """Base class for all focus errors"""


class ValidationError(FocusError, ValueError):
    """Malformed user input (time, domain, duration)"""


class PersistenceError(FocusError):
    """Rules file could not be read, parsed or written"""


class FileAccessError(FocusError):
    """Hosts file could not be read or written"""


class ExternalCommandError(FocusError):
    """Display tool missing or failing"""


class QuotaExceeded(FocusError):
    def __init__(self, limit):
        self.limit = limit
        super().__init__(f"Daily exception limit ({limit}) reached")


class NoSuchRule(FocusError):
    def __init__(self, domain):
        self.domain = domain
        super().__init__(f"No blocking rule for {domain}")
