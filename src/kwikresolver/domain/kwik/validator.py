"""Kwik URL validation."""

from __future__ import annotations

from urllib.parse import urlparse

# Known Kwik top-level domain variants.
KWIK_DOMAINS = frozenset({"kwik.si", "kwik.cx", "kwik.sx", "kwik.li"})

_SCHEMES = frozenset({"http", "https"})


def is_valid_target_url(value: object) -> bool:
    """Return True if *value* is an absolute http(s) URL on a Kwik domain.

    Subdomains of the known domains are accepted.  Never raises.
    """
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        parsed = urlparse(value.strip())
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        return False

    if parsed.scheme.lower() not in _SCHEMES or not hostname:
        return False
    return any(
        hostname == domain or hostname.endswith(f".{domain}") for domain in KWIK_DOMAINS
    )
