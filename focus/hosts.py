#!/usr/bin/python3
"""
Hosts file management for focus.

Only the region between BLOCKER_START and BLOCKER_END belongs to us; every
other line of the hosts file is kept verbatim and in order.
"""
import logging
from typing import Iterable, List, Tuple

from focus.errors import FileAccessError

logger = logging.getLogger(__name__)

HOSTS_PATH = "/etc/hosts"
# Markers to delimit our managed block section in the hosts file
BLOCKER_START = "# BEGIN FOCUS BLOCK"
BLOCKER_END = "# END FOCUS BLOCK"
REDIRECT_IP = "127.0.0.1"
# Foreign bytes that are not valid UTF-8 are carried through unchanged
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


def generate_block_entries(domains: Iterable[str]) -> List[str]:
    """Hosts entries for each domain and its www. subdomain."""
    entries = []
    for domain in domains:
        entries.append(f"{REDIRECT_IP} {domain}")
        entries.append(f"{REDIRECT_IP} www.{domain}")
    return entries


def strip_managed_block(content: str) -> List[str]:
    """
    Return the lines of `content` that lie outside any managed block.

    Every start/end pair is removed, not just the first. An end marker with
    no start is dropped, and a block that is never closed runs to EOF.
    """
    kept = []
    in_block_section = False
    for line in content.splitlines():
        if line.strip() == BLOCKER_START:
            in_block_section = True
            continue
        if line.strip() == BLOCKER_END:
            in_block_section = False
            continue
        if not in_block_section:
            kept.append(line)
    return kept


def reconcile(content: str, blocked_domains: List[str]) -> Tuple[str, bool]:
    """
    Build the hosts file content for `blocked_domains`.

    Returns (new_content, changed). No block is written at all when nothing
    is blocked. `changed` ignores leading/trailing whitespace so a missing
    final newline never triggers a rewrite.
    """
    new_lines = strip_managed_block(content)
    if blocked_domains:
        new_lines.append(BLOCKER_START)
        new_lines.extend(generate_block_entries(sorted(blocked_domains)))
        new_lines.append(BLOCKER_END)

    new_content = "\n".join(new_lines) + "\n"
    changed = new_content.strip() != content.strip()
    return new_content, changed


class HostsFile:
    """The hosts file on disk"""

    def __init__(self, path: str = HOSTS_PATH):
        self.path = path

    def read(self) -> str:
        try:
            with open(self.path, 'r', encoding=ENCODING, errors=ENCODING_ERRORS) as f:
                return f.read()
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeError) as e:
            raise FileAccessError(f"Cannot read {self.path}: {e}") from e

    def write(self, content: str):
        try:
            with open(self.path, 'w', encoding=ENCODING, errors=ENCODING_ERRORS) as f:
                f.write(content)
        except (OSError, UnicodeError) as e:
            raise FileAccessError(f"Cannot write {self.path} (running as root?): {e}") from e

    def apply(self, blocked_domains: List[str]) -> bool:
        """Bring the managed block in line with `blocked_domains`; True if written."""
        new_content, changed = reconcile(self.read(), blocked_domains)
        if not changed:
            return False
        self.write(new_content)
        logger.info(f"Updated hosts file with {len(blocked_domains)} blocked domains")
        return True
