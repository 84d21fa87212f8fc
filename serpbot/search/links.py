"""Link helpers for search result extraction."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from loguru import logger

TRACKING_PARAMS = frozenset({"utm_source", "utm_medium", "utm_campaign", "ref", "source"})

# Engine-internal click wrappers; the real target is hidden behind them.
REDIRECT_PREFIXES = ("/newtabredir", "/ck/a")


def is_absolute(link: str) -> bool:
    return link.startswith(("http://", "https://"))


def is_redirect_wrapper(link: str) -> bool:
    return link.startswith(REDIRECT_PREFIXES)


def absolutize(link: str, origin: str) -> str:
    """Resolve a link found on a page served from origin."""
    if not link or is_absolute(link):
        return link
    origin = origin.rstrip("/")
    if link.startswith("//"):
        scheme = urlsplit(origin).scheme or "https"
        return f"{scheme}:{link}"
    if link.startswith("/"):
        return f"{origin}{link}"
    return f"{origin}/{link}"


def strip_tracking_params(link: str) -> str:
    """Remove known tracking query parameters; unparseable links are returned as-is."""
    try:
        parts = urlsplit(link)
        query = parse_qsl(parts.query, keep_blank_values=True)
    except ValueError:
        logger.warning("Failed to parse URL: {}", link)
        return link

    kept = [(key, value) for key, value in query if key not in TRACKING_PARAMS]
    if len(kept) == len(query):
        return link
    return urlunsplit(parts._replace(query=urlencode(kept)))


def normalize_link(link: str, origin: str) -> str:
    """
    Turn a raw result href into an absolute link without tracking parameters.

    Redirect wrappers normalize to an empty string: they are not directly
    dereferenceable, and a partial link is worse than none.
    """
    link = (link or "").strip()
    if not link:
        return ""
    if not is_absolute(link) and is_redirect_wrapper(link):
        logger.debug("Skipping redirect URL: {}", link)
        return ""
    return strip_tracking_params(absolutize(link, origin))


def host_of(link: str) -> str:
    """Hostname of an absolute link, or an empty string."""
    try:
        return urlsplit(link).hostname or ""
    except ValueError:
        return ""


def is_same_site_navigation(link: str, site_domain: str) -> bool:
    """True for the engine's own search-page and click-tracking links."""
    try:
        parts = urlsplit(link)
    except ValueError:
        return False
    host = (parts.hostname or "").lower()
    if not site_domain or not (host == site_domain or host.endswith(f".{site_domain}")):
        return False
    return parts.path == "/search" or parts.path.startswith(("/search/", "/ck/"))
