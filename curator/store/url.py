"""URL validation and deduplication keys."""

import ipaddress
from urllib.parse import urlsplit


VALID_URL_SCHEMES = ("http", "https")

LOOPBACK_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "0.0.0.0"})


def is_loopback_host(host: str) -> bool:
    """Check whether a hostname points at the local machine.

    Args:
        host: Hostname without port.

    Returns:
        True for ``localhost`` names and loopback or unspecified addresses.
    """
    host = host.lower().rstrip(".")
    if host in LOOPBACK_HOSTNAMES or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_loopback or address.is_unspecified


def is_valid_item_url(url: str | None) -> bool:
    """Check that an item URL is absolute, http(s), and not loopback.

    Args:
        url: Candidate URL.

    Returns:
        True if the item may enter scoring.
    """
    if not url or not url.strip():
        return False

    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError:
        return False

    if parts.scheme.lower() not in VALID_URL_SCHEMES or not host:
        return False

    return not is_loopback_host(host)


def url_key(url: str) -> str:
    """Build the deduplication key for a URL.

    The key is the lowercased hostname plus the path; scheme, port, query
    string and fragment are dropped, as is a trailing slash on non-root
    paths. Unparsable URLs key on their stripped text.

    Args:
        url: Item URL.

    Returns:
        Normalized ``hostname + path`` key.
    """
    raw = url.strip()
    try:
        parts = urlsplit(raw)
        host = parts.hostname
    except ValueError:
        return raw

    if not host:
        return raw

    path = parts.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/")

    return f"{host.lower()}{path}"
