"""Common utility functions."""

from typing import Any
from urllib.parse import urlparse


def get_value(obj: Any, key: str) -> Any:
    """Get value from dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def get_host(url: str | None) -> str:
    """Return the lowercased host of a URL, without a leading ``www.``."""
    if not url:
        return ""
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def host_matches(host: str, domain: str) -> bool:
    """True if ``host`` is ``domain`` or one of its subdomains."""
    host = host.lower()
    domain = domain.lower().lstrip(".")
    if domain.startswith("www."):
        domain = domain[4:]
    return bool(domain) and (host == domain or host.endswith("." + domain))
