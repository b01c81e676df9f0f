"""
Tests for version parsing, comparison and detection.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from geminit.core.services.versioning import (
    compare_versions,
    detect_runtime_version,
    get_tool_version,
    needs_upgrade,
    parse_version,
)


class TestParseVersion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("20.10.0", (20, 10, 0)),
            ("v20.10.0", (20, 10, 0)),
            ("  v18.19.1\n", (18, 19, 1)),
            ("20.10", (20, 10, 0)),
            ("22", (22, 0, 0)),
            ("21.0.0-rc.1", (21, 0, 0)),
        ],
    )
    def test_valid(self, raw, expected):
        assert parse_version(raw) == expected

    @pytest.mark.parametrize("raw", ["", "node", "latest", "x1.2.3"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_version(raw)


class TestOrdering:
    """Numeric, not lexical, ordering."""

    def test_minor_two_digits(self):
        assert needs_upgrade("20.9.0", "20.10.0") is True
        assert "20.9.0" > "20.10.0"  # lexical order disagrees

    def test_major_two_digits(self):
        assert needs_upgrade("9.11.2", "10.0.0") is True

    def test_equal_is_enough(self):
        assert needs_upgrade("20.18.0", "20.18.0") is False

    def test_newer_is_enough(self):
        assert needs_upgrade("22.1.0", "20.18.0") is False

    def test_absent_runtime_needs_upgrade(self):
        assert needs_upgrade("0.0.0", "20.18.0") is True

    @pytest.mark.parametrize(
        "a, b",
        [("1.2.3", "1.2.10"), ("1.9.9", "1.10.0"), ("2.0.0", "10.0.0"), ("0.0.0", "0.0.1")],
    )
    def test_agrees_with_tuple_order(self, a, b):
        assert compare_versions(a, b) == -1
        assert compare_versions(b, a) == 1
        assert compare_versions(a, a) == 0


class TestDetection:
    def test_tool_missing(self):
        with patch("geminit.core.services.versioning.shutil.which", return_value=None):
            assert get_tool_version("node") is None
            assert detect_runtime_version("node") == "0.0.0"

    def test_parses_node_output(self):
        with patch("geminit.core.services.versioning.shutil.which", return_value="/usr/bin/node"), \
             patch("geminit.core.services.versioning.run_command",
                   return_value={"ok": True, "stdout": "v20.11.1\n", "stderr": ""}) as run:
            assert detect_runtime_version("node") == "20.11.1"
        assert run.call_args[0][0] == ["/usr/bin/node", "--version"]

    def test_failing_command(self):
        with patch("geminit.core.services.versioning.shutil.which", return_value="/usr/bin/node"), \
             patch("geminit.core.services.versioning.run_command",
                   return_value={"ok": False, "error": "boom"}):
            assert detect_runtime_version("node") == "0.0.0"

    def test_unparsable_output(self):
        with patch("geminit.core.services.versioning.shutil.which", return_value="/usr/bin/gemini"), \
             patch("geminit.core.services.versioning.run_command",
                   return_value={"ok": True, "stdout": "dev build", "stderr": ""}):
            assert get_tool_version("gemini") is None

    def test_no_timeout_unless_given(self):
        with patch("geminit.core.services.versioning.shutil.which", return_value="/usr/bin/node"), \
             patch("geminit.core.services.versioning.run_command",
                   return_value={"ok": True, "stdout": "v22.1.0", "stderr": ""}) as run:
            detect_runtime_version("node")
            assert run.call_args[1]["timeout"] is None
            detect_runtime_version("node", timeout=90)
            assert run.call_args[1]["timeout"] == 90

    def test_npm_version(self):
        with patch("geminit.core.services.versioning.shutil.which", return_value="/usr/bin/npm"), \
             patch("geminit.core.services.versioning.run_command",
                   return_value={"ok": True, "stdout": "10.9.2\n", "stderr": ""}):
            assert get_tool_version("npm") == "10.9.2"
