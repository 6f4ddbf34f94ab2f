"""Tests for longest-prefix permission resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from testadura.core.errors import PermissionRuleError
from testadura.deploy.permissions import (
    DEFAULT_DIR_MODE,
    DEFAULT_FILE_MODE,
    DEFAULT_RULES,
    FileKind,
    PermissionRule,
    find_rule,
    load_permission_rules,
    parse_permission_rules,
    resolve_mode,
)


class TestDefaultRules:
    def test_table_has_the_expected_rows(self):
        assert [rule.to_row() for rule in DEFAULT_RULES] == [
            "/usr/local/bin|755|755|User entry points",
            "/usr/local/sbin|755|755|Admin entry points",
            "/etc/update-motd.d|755|755|Executed by system",
            "/usr/local/lib/testadura|644|755|Implementation only",
            "/usr/local/lib/testadura/common/tools|755|755|Implementation only",
            "/etc/testadura|640|750|Configuration",
            "/var/lib/testadura|600|700|Application state",
        ]

    @pytest.mark.parametrize(
        "path, kind, expected",
        [
            ("/usr/local/bin/td-foo", FileKind.FILE, 0o755),
            ("/usr/local/lib/testadura/common/core.sh", FileKind.FILE, 0o644),
            ("/usr/local/lib/testadura/common/tools/deploy.sh", FileKind.FILE, 0o755),
            ("/usr/local/lib/testadura/common/tools", FileKind.DIRECTORY, 0o755),
            ("/etc/testadura/app.cfg", FileKind.FILE, 0o640),
            ("/etc/testadura", FileKind.DIRECTORY, 0o750),
            ("/var/lib/testadura/run.state", FileKind.FILE, 0o600),
            ("/var/lib/testadura", FileKind.DIRECTORY, 0o700),
        ],
    )
    def test_resolves_modes(self, path, kind, expected):
        assert resolve_mode(path, kind) == expected

    def test_unmatched_path_gets_fallback_modes(self):
        assert resolve_mode("/opt/other/file", FileKind.FILE) == DEFAULT_FILE_MODE
        assert resolve_mode("/opt/other", FileKind.DIRECTORY) == DEFAULT_DIR_MODE

    def test_prefix_matches_whole_segments_only(self):
        # /etc/testadura-extra is not under /etc/testadura
        assert find_rule("/etc/testadura-extra/app.cfg") is None
        assert resolve_mode("/etc/testadura-extra/app.cfg", FileKind.FILE) == 0o644


class TestFindRule:
    def test_longest_prefix_wins_regardless_of_order(self):
        narrow = PermissionRule("/a/b", 0o700, 0o700)
        broad = PermissionRule("/a", 0o600, 0o711)
        assert find_rule("/a/b/c", [narrow, broad]) is narrow
        assert find_rule("/a/b/c", [broad, narrow]) is narrow

    def test_equal_length_keeps_first_rule(self):
        first = PermissionRule("/x/y", 0o600, 0o700, "first")
        second = PermissionRule("/x/y", 0o644, 0o755, "second")
        assert find_rule("/x/y/z", [first, second]) is first

    def test_root_rule_matches_everything(self):
        root = PermissionRule("/", 0o600, 0o700)
        assert find_rule("/anything/at/all", [root]) is root


class TestRuleRows:
    def test_from_row_parses_octal_modes(self):
        rule = PermissionRule.from_row("/srv/app|640|750|App data")
        assert rule == PermissionRule("/srv/app", 0o640, 0o750, "App data")

    def test_description_is_optional(self):
        assert PermissionRule.from_row("/srv|600|700").description == ""

    @pytest.mark.parametrize(
        "row",
        [
            "/srv|644",
            "/srv|64x|755|bad mode",
            "/srv|17777|755|too large",
            "srv|644|755|relative",
            "/srv/|644|755|trailing slash",
        ],
    )
    def test_invalid_rows_are_rejected(self, row):
        with pytest.raises(PermissionRuleError):
            PermissionRule.from_row(row)

    def test_parse_skips_comments_and_blank_lines(self):
        rules = parse_permission_rules(["# custom table", "", "/srv|600|700|Data", "   "])
        assert [rule.prefix for rule in rules] == ["/srv"]


def test_load_permission_rules(tmp_path: Path):
    table = tmp_path / "rules.txt"
    table.write_text("/etc/testadura|600|700|Locked down\n/usr/local/bin|755|755|\n", encoding="utf-8")

    rules = load_permission_rules(table)

    assert resolve_mode("/etc/testadura/app.cfg", FileKind.FILE, rules) == 0o600
    assert resolve_mode("/usr/local/bin/td-x", FileKind.FILE, rules) == 0o755


def test_load_missing_rule_table_raises(tmp_path: Path):
    with pytest.raises(PermissionRuleError, match="Cannot read permission rules"):
        load_permission_rules(tmp_path / "absent.txt")
