"""Test hosts file reconciliation"""

import os

import pytest

from focus.errors import FileAccessError
from focus.hosts import BLOCKER_END, BLOCKER_START, HostsFile, generate_block_entries, reconcile


class TestReconcile:
    """Test merging the managed block into hosts content"""

    def test_stale_block_replaced(self):
        content = (
            "127.0.0.1 localhost\n"
            f"{BLOCKER_START}\n"
            "127.0.0.1 stale.com\n"
            f"{BLOCKER_END}\n"
            "::1 ip6-localhost"
        )
        new_content, changed = reconcile(content, ['a.com'])

        assert changed
        assert new_content.splitlines() == [
            "127.0.0.1 localhost",
            "::1 ip6-localhost",
            BLOCKER_START,
            "127.0.0.1 a.com",
            "127.0.0.1 www.a.com",
            BLOCKER_END,
        ]
        assert 'stale.com' not in new_content

    def test_idempotent(self):
        content = "127.0.0.1 localhost\n# my own comment\n"
        first, changed = reconcile(content, ['b.com', 'a.com'])
        assert changed

        second, changed_again = reconcile(first, ['b.com', 'a.com'])
        assert not changed_again
        assert second == first

    def test_domains_written_sorted(self):
        new_content, _ = reconcile("", ['b.com', 'a.com'])
        lines = new_content.splitlines()
        assert lines.index("127.0.0.1 a.com") < lines.index("127.0.0.1 b.com")

    def test_empty_blocklist_removes_block(self):
        content = f"127.0.0.1 localhost\n{BLOCKER_START}\n127.0.0.1 a.com\n{BLOCKER_END}\n"
        new_content, changed = reconcile(content, [])

        assert changed
        assert new_content == "127.0.0.1 localhost\n"
        assert BLOCKER_START not in new_content

    def test_nothing_to_do(self):
        new_content, changed = reconcile("127.0.0.1 localhost\n", [])
        assert not changed
        assert new_content == "127.0.0.1 localhost\n"

    def test_missing_trailing_newline_is_not_a_change(self):
        _, changed = reconcile("127.0.0.1 localhost", [])
        assert not changed

    def test_multiple_blocks_collapse_to_one(self):
        content = (
            "first\n"
            f"{BLOCKER_START}\nold1\n{BLOCKER_END}\n"
            "middle\n"
            f"{BLOCKER_START}\nold2\n{BLOCKER_END}\n"
            "last\n"
        )
        new_content, _ = reconcile(content, ['a.com'])
        lines = new_content.splitlines()

        assert lines[:3] == ["first", "middle", "last"]
        assert lines.count(BLOCKER_START) == 1
        assert lines.count(BLOCKER_END) == 1
        assert 'old1' not in new_content and 'old2' not in new_content

    def test_unterminated_block_dropped_to_eof(self):
        content = f"keep\n{BLOCKER_START}\n127.0.0.1 old.com\ntrailing\n"
        new_content, _ = reconcile(content, [])
        assert new_content == "keep\n"

    def test_stray_end_marker_dropped(self):
        content = f"keep1\n{BLOCKER_END}\nkeep2\n"
        new_content, _ = reconcile(content, [])
        assert new_content == "keep1\nkeep2\n"

    def test_markers_matched_with_surrounding_whitespace(self):
        content = f"keep\n  {BLOCKER_START}  \nold\n{BLOCKER_END}\t\n"
        new_content, _ = reconcile(content, [])
        assert new_content == "keep\n"

    def test_foreign_lines_preserved_in_order(self):
        foreign = ["# comment", "10.0.0.1 nas", "", "192.168.1.5  printer  # office"]
        content = "\n".join(foreign[:2] + [BLOCKER_START, "x", BLOCKER_END] + foreign[2:]) + "\n"
        new_content, _ = reconcile(content, ['a.com'])
        assert new_content.splitlines()[:4] == foreign

    def test_generate_block_entries(self):
        assert generate_block_entries(['a.com']) == ["127.0.0.1 a.com", "127.0.0.1 www.a.com"]


class TestHostsFile:
    """Test the on-disk hosts file"""

    def test_apply_writes_only_on_change(self, hosts_path):
        hosts = HostsFile(hosts_path)

        assert hosts.apply(['youtube.com'])
        mtime = os.stat(hosts_path).st_mtime_ns
        assert not hosts.apply(['youtube.com'])
        assert os.stat(hosts_path).st_mtime_ns == mtime

        with open(hosts_path) as f:
            content = f.read()
        assert content.startswith("127.0.0.1 localhost\n::1 ip6-localhost\n")
        assert "127.0.0.1 www.youtube.com" in content

    def test_missing_file_reads_empty(self, tmp_path):
        assert HostsFile(str(tmp_path / 'nope')).read() == ""

    def test_unwritable_path(self, tmp_path):
        hosts = HostsFile(str(tmp_path / 'missing-dir' / 'hosts'))
        with pytest.raises(FileAccessError):
            hosts.apply(['youtube.com'])

    def test_non_utf8_bytes_preserved(self, tmp_path):
        """Foreign lines in other encodings survive a rewrite byte for byte"""
        path = tmp_path / 'hosts'
        path.write_bytes(b"127.0.0.1 localhost\n10.0.0.1 caf\xe9-nas\n")
        hosts = HostsFile(str(path))

        assert hosts.apply(['a.com'])
        assert path.read_bytes().startswith(b"127.0.0.1 localhost\n10.0.0.1 caf\xe9-nas\n")

        assert hosts.apply([])
        assert path.read_bytes() == b"127.0.0.1 localhost\n10.0.0.1 caf\xe9-nas\n"
