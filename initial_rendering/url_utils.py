"""Shared URL utilities."""

from __future__ import annotations

import re

_HTTP_URL_RE = re.compile(r"^https?://")


def is_http_url(url: object) -> bool:
    """Return True when ``url`` is an absolute http or https URL."""
    if not isinstance(url, str):
        return False
    return bool(_HTTP_URL_RE.match(url))
