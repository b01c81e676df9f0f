"""
Tests for scaffold helpers and LICENSE producers.
"""

from __future__ import annotations

import urllib.error
from pathlib import Path
from unittest.mock import patch

import pytest

from geminit.core.errors import NetworkFetchError, ScaffoldError
from geminit.core.services import scaffold
from geminit.core.services.license_text import (
    FullTextLicense,
    HeaderOnlyLicense,
    choose_license,
    fetch_license_text,
)


# ── Scaffold ─────────────────────────────────────────────────────


class TestWriteIfAbsent:
    def test_writes_new(self, tmp_path: Path):
        target = tmp_path / "GEMINI.md"
        assert scaffold.write_if_absent(target, scaffold.NOTES, step="notes") is True
        assert target.read_text() == scaffold.NOTES

    def test_never_overwrites(self, tmp_path: Path):
        target = tmp_path / "GEMINI.md"
        target.write_text("mine")
        assert scaffold.write_if_absent(target, scaffold.NOTES, step="notes") is False
        assert target.read_text() == "mine"

    def test_unwritable_names_path(self, tmp_path: Path):
        target = tmp_path / "missing-dir" / "README.md"
        with pytest.raises(ScaffoldError) as exc:
            scaffold.write_if_absent(target, "x", step="readme")
        assert exc.value.path == target
        assert str(target) in str(exc.value)


class TestEnsureDir:
    def test_reports_created_then_existing(self, tmp_path: Path):
        target = tmp_path / "memory"
        assert scaffold.ensure_dir(target) is True
        assert scaffold.ensure_dir(target) is False

    def test_file_in_the_way(self, tmp_path: Path):
        target = tmp_path / "opinions"
        target.write_text("")
        with pytest.raises(ScaffoldError):
            scaffold.ensure_dir(target)


class TestSeedOpinions:
    def test_three_empty_files(self, tmp_path: Path):
        seeded = scaffold.seed_opinions(tmp_path)
        assert seeded == list(scaffold.OPINION_FILES)
        assert all((tmp_path / f).stat().st_size == 0 for f in seeded)

    def test_existing_file_not_truncated(self, tmp_path: Path):
        (tmp_path / "agreements.md").write_text("keep")
        seeded = scaffold.seed_opinions(tmp_path)
        assert "agreements.md" not in seeded
        assert (tmp_path / "agreements.md").read_text() == "keep"


class TestTemplates:
    def test_readme_interpolates(self):
        text = scaffold.render_readme("demo", env_name=".venv", model="gemini-2.5-pro", output_format="json")
        assert text.startswith("# demo\n")
        assert "--model gemini-2.5-pro --output-format json" in text
        assert "source .venv/bin/activate" in text
        assert "GEMINI_API_KEY=..." in text

    def test_readme_uses_configured_key(self):
        text = scaffold.render_readme(
            "demo", env_name=".venv", model="gemini-2.5-pro", output_format="text",
            secret_key="GOOGLE_API_KEY",
        )
        assert "GOOGLE_API_KEY=..." in text
        assert "GEMINI_API_KEY" not in text

    def test_gitignore_sections(self):
        headers = [line for line in scaffold.GITIGNORE.splitlines() if line.startswith("#")]
        assert "# Python" in headers
        assert "# Secrets" in headers
        assert ".env" in scaffold.GITIGNORE.splitlines()


# ── License ──────────────────────────────────────────────────────


class TestProducers:
    def test_full_text(self):
        text = FullTextLicense("MIT License\n\nbody\n\n").render(2026)
        assert text == "Copyright (c) 2026 The project authors\n\nMIT License\n\nbody\n"

    def test_header_only(self):
        text = HeaderOnlyLicense("MIT").render(2026)
        assert text.splitlines() == [
            "Copyright (c) 2026 The project authors",
            "",
            "SPDX-License-Identifier: MIT",
        ]


class TestChooseLicense:
    def test_online(self):
        with patch("geminit.core.services.license_text.fetch_license_text", return_value="MIT License"):
            producer, warning = choose_license("https://example.invalid/mit", "MIT")
        assert producer.kind == "full-text"
        assert warning is None

    def test_offline_never_raises(self):
        with patch(
            "geminit.core.services.license_text.urllib.request.urlopen",
            side_effect=urllib.error.URLError("Name or service not known"),
        ):
            producer, warning = choose_license("https://example.invalid/mit", "MIT")
        assert producer.kind == "header-only"
        assert "example.invalid" in warning

    def test_fetch_error_type(self):
        with patch(
            "geminit.core.services.license_text.urllib.request.urlopen",
            side_effect=TimeoutError("timed out"),
        ):
            with pytest.raises(NetworkFetchError):
                fetch_license_text("https://example.invalid/mit", timeout=1)
