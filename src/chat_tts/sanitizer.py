"""URL shortening applied to message text before synthesis."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

_URL_RE = re.compile(r"\b[A-Za-z][A-Za-z0-9+.\-]*:[^\s<>\"']+")
_TRAILING_PUNCTUATION = ".,;:!?)]}"
_SPOKEN_SCHEMES = frozenset({"http", "https"})


def _shorten(match: re.Match[str]) -> str:
    candidate = match.group(0)
    url = candidate.rstrip(_TRAILING_PUNCTUATION)
    trailing = candidate[len(url) :]
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return candidate

    if parts.scheme.lower() not in _SPOKEN_SCHEMES or not host:
        return candidate

    if host.startswith("www."):
        host = host[4:]
    if not host:
        return candidate
    return f"{host}{trailing}"


def sanitize(text: str) -> str:
    """Replace HTTP(S) URLs with their bare host name.

    Other schemes and anything that does not parse as a URL are left as they
    are, so running the function on its own output changes nothing.
    """
    return _URL_RE.sub(_shorten, text)
