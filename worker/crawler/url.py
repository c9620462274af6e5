"""URL and domain helpers for the exposure analyzers."""

import re
from urllib.parse import urlparse

# Hostname labels: letters, digits, hyphens; at least one dot (or localhost)
_HOST_PATTERN = re.compile(
    r"^(localhost|([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z0-9-]{2,63})$"
)


def normalize_domain(url: str) -> str | None:
    """
    Reduce user input to a bare host name.

    Accepts ``https://www.Example.com/path``, ``example.com/`` and similar,
    and returns ``example.com``. Returns None when no plausible host remains.
    """
    if not url or not url.strip():
        return None

    candidate = url.strip()
    if candidate.startswith("//"):
        candidate = "https:" + candidate
    elif "://" not in candidate:
        candidate = "https://" + candidate

    try:
        parsed = urlparse(candidate)
        host = (parsed.hostname or "").lower()
    except ValueError:
        return None

    if parsed.scheme not in ("http", "https"):
        return None
    if host.startswith("www."):
        host = host[4:]
    host = host.rstrip(".")

    if not host or not _HOST_PATTERN.match(host):
        return None
    return host


def ensure_absolute(url: str, domain: str) -> str:
    """Resolve a sitemap reference against the analyzed domain."""
    url = url.strip()
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return f"https:{url}"
    if url.startswith("/"):
        return f"https://{domain}{url}"
    return f"https://{domain}/{url}"

