"""Turn raw ``src`` attribute values into fully-qualified URLs."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

_SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")


def is_absolute(src: str) -> bool:
    return bool(_SCHEME_PATTERN.match(src))


def to_fully_qualified_url(src: str, base_url: str | None = None) -> str:
    """Join ``src`` onto ``base_url`` with exactly one separating slash.

    Absolute sources are returned as-is. Protocol-relative sources
    (``//host/path``) borrow the scheme of ``base_url``. Without a base the
    source comes back unchanged; an invalid result surfaces as a fetch error.
    """

    src = src.strip()
    if is_absolute(src):
        return src
    if not base_url:
        return src
    if src.startswith("//"):
        scheme = urlsplit(base_url).scheme or "http"
        return f"{scheme}:{src}"
    return f"{base_url.rstrip('/')}/{src.lstrip('/')}"


__all__ = ["is_absolute", "to_fully_qualified_url"]
