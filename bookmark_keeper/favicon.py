"""Favicon lookup helpers for bookmark display."""

from __future__ import annotations

from urllib.parse import urlencode, urlparse

FAVICON_SERVICE = "https://www.google.com/s2/favicons"
FAVICON_SIZE = 32


def extract_domain(url: str) -> str:
    """Hostname of ``url``; the input is returned unchanged when it has none."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return url
    return hostname or url


def favicon_url(url: str) -> str:
    """Icon URL for the bookmark's host, or an empty string if there is no host."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return ""
    if not hostname:
        return ""
    return f"{FAVICON_SERVICE}?{urlencode({'domain': hostname, 'sz': FAVICON_SIZE})}"


def initial(text: str) -> str:
    """Single-character stand-in icon taken from a title."""
    return text[0].upper() if text else "?"
