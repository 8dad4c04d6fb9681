"""
UTM parameter extraction for campaign attribution.

The tracker forwards the five standard UTM parameters of the current page
URL with every event:

- utm_source: Where the traffic came from (e.g., "google", "newsletter")
- utm_medium: Marketing medium (e.g., "cpc", "email", "social")
- utm_campaign: Campaign name (e.g., "spring_sale")
- utm_term: Paid search keywords
- utm_content: Differentiates similar content/links

Unlike dashboard-side attribution, no alias names (ref, source, ...) are
read here. The collector receives exactly what the page URL carries.
"""

from dataclasses import dataclass
from urllib.parse import parse_qs

UTM_KEYS = ("utm_source", "utm_medium", "utm_campaign", "utm_term", "utm_content")


@dataclass(frozen=True)
class UTMParams:
    """
    UTM parameters present on a page URL.

    All fields are optional - a URL may have some, all, or none.
    """
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_term: str | None = None
    utm_content: str | None = None

    @property
    def has_utm(self) -> bool:
        """Check if any UTM parameters are present."""
        return any(getattr(self, key) for key in UTM_KEYS)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary, excluding missing values."""
        return {key: getattr(self, key) for key in UTM_KEYS if getattr(self, key)}


def parse_utm(search: str) -> UTMParams:
    """
    Extract the standard UTM parameters from a query string.

    Args:
        search: Query string, with or without the leading "?"

    Returns:
        UTMParams with the first non-empty value of each key

    Examples:
        >>> parse_utm("?utm_source=google&utm_medium=cpc").to_dict()
        {'utm_source': 'google', 'utm_medium': 'cpc'}
    """
    if not search:
        return UTMParams()

    try:
        params = parse_qs(search.lstrip("?"), keep_blank_values=False)
    except (TypeError, ValueError):
        return UTMParams()

    values = {}
    for key in UTM_KEYS:
        found = params.get(key, [])
        if found and found[0]:
            values[key] = found[0]
    return UTMParams(**values)


def utm_properties(search: str) -> dict[str, str] | None:
    """Return the UTM map for event properties, or None when there is none."""
    utm = parse_utm(search)
    return utm.to_dict() if utm.has_utm else None
