"""
LICENSE producers — full fetched text or a header-only fallback.

``choose_license`` performs the network call once and returns the
producer to use; the fetch failure never escapes this module.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from datetime import date

from geminit.core.errors import NetworkFetchError

logger = logging.getLogger(__name__)

HOLDER = "The project authors"


def copyright_header(year: int) -> str:
    return f"Copyright (c) {year} {HOLDER}"


class LicenseProducer(ABC):
    """Renders LICENSE file content for a given year."""

    @property
    @abstractmethod
    def kind(self) -> str:
        """``"full-text"`` or ``"header-only"``."""

    @abstractmethod
    def render(self, year: int) -> str:
        """Complete file content, ending with a newline."""


class FullTextLicense(LicenseProducer):
    """Fetched license text with the copyright header prepended."""

    def __init__(self, text: str) -> None:
        self.text = text

    @property
    def kind(self) -> str:
        return "full-text"

    def render(self, year: int) -> str:
        return f"{copyright_header(year)}\n\n{self.text.strip()}\n"


class HeaderOnlyLicense(LicenseProducer):
    """Copyright header plus a one-line SPDX identifier."""

    def __init__(self, license_id: str) -> None:
        self.license_id = license_id

    @property
    def kind(self) -> str:
        return "header-only"

    def render(self, year: int) -> str:
        return f"{copyright_header(year)}\n\nSPDX-License-Identifier: {self.license_id}\n"


def fetch_license_text(url: str, *, timeout: int = 15) -> str:
    """Download license text.

    Raises:
        NetworkFetchError: On connection/HTTP failure or an empty body.
    """
    req = urllib.request.Request(url, headers={"User-Agent": "geminit/0.1"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            text = resp.read().decode("utf-8", errors="replace")
    except (urllib.error.URLError, TimeoutError, OSError, ValueError) as e:
        raise NetworkFetchError(f"Cannot fetch license text from {url}: {e}", step="license") from e
    if not text.strip():
        raise NetworkFetchError(f"Empty license text from {url}", step="license")
    return text


def choose_license(
    url: str,
    license_id: str,
    *,
    timeout: int = 15,
) -> tuple[LicenseProducer, str | None]:
    """Pick the producer based on the fetch outcome.

    Returns:
        ``(producer, warning)`` — ``warning`` is None when the fetch worked.
    """
    try:
        text = fetch_license_text(url, timeout=timeout)
    except NetworkFetchError as e:
        warning = f"{e.message}; writing {license_id} header only"
        logger.warning(warning)
        return HeaderOnlyLicense(license_id), warning
    return FullTextLicense(text), None


def current_year() -> int:
    return date.today().year
