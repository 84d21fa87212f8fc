"""URL guards for browser navigation and subresource requests."""

from __future__ import annotations

import ipaddress
from urllib.parse import urlparse

_LOCAL_HOSTNAMES = {
    "localhost",
    "localhost.localdomain",
    "host.docker.internal",
}

_NAVIGATION_SCHEMES = {"http", "https"}
_SUBRESOURCE_SCHEMES = _NAVIGATION_SCHEMES | {"about", "blob", "data"}


def url_block_reason(
    url: str,
    *,
    allow_private_network: bool,
    block_file_scheme: bool,
    navigation: bool = True,
) -> str | None:
    """
    Return why a URL must not be loaded, or None if it is allowed.

    Top-level navigations accept http(s) only; subresource requests may also
    use about:, blob: and data: URLs.
    """
    parsed = urlparse(url)
    scheme = (parsed.scheme or "").lower()

    if scheme == "file" and block_file_scheme:
        return "file:// URLs are blocked"

    allowed = _NAVIGATION_SCHEMES if navigation else _SUBRESOURCE_SCHEMES
    if scheme not in allowed:
        return f"Unsupported URL scheme: {scheme or 'none'}"
    if scheme not in _NAVIGATION_SCHEMES:
        return None

    host = parsed.hostname
    if not host:
        return "URL host is required"
    if not allow_private_network and is_private_or_local_host(host):
        return f"Private/local host blocked: {host}"
    return None


def is_private_or_local_host(host: str) -> bool:
    """Check whether a host is local/private based on hostname or literal IP."""
    normalized = host.rstrip(".").lower()

    if normalized in _LOCAL_HOSTNAMES or normalized.endswith(".local"):
        return True

    try:
        ip = ipaddress.ip_address(normalized)
    except ValueError:
        return False

    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )
