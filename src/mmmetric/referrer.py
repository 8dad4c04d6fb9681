"""
Referrer handling for outgoing events.

The tracker only reports referrers from other hosts. Same-site navigation
is internal traffic and is sent as no referrer at all, so the collector
can classify the visit as direct.
"""

from urllib.parse import urlparse


def referrer_host(referrer: str) -> str | None:
    """Extract the hostname of a referrer URL, or None when unparseable."""
    try:
        parsed = urlparse(referrer)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return parsed.hostname


def external_referrer(referrer: str | None, current_host: str) -> str | None:
    """
    Return the referrer if it points to another host.

    Args:
        referrer: The document referrer (may be empty)
        current_host: Hostname of the page being tracked

    Returns:
        The referrer unchanged, or None if it is empty, malformed,
        or on the same host as the current page.

    Examples:
        >>> external_referrer("https://google.com/search", "example.com")
        'https://google.com/search'

        >>> external_referrer("https://example.com/about", "example.com") is None
        True
    """
    if not referrer:
        return None

    host = referrer_host(referrer)
    if host is None or host == current_host:
        return None
    return referrer
