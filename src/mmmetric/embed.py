"""
Embed snippet for the tracking script.

Renders the ``<script>`` tag whose attributes form the embedding
contract read back by ``config.resolve_config``.
"""
from html import escape

from .config import ATTR_API, ATTR_CROSS_DOMAIN, ATTR_SITE, ATTR_SUPABASE_URL


def script_attributes(
    site_id: str,
    api_url: str | None = None,
    cross_domains: tuple[str, ...] | list[str] = (),
    supabase_url: str | None = None,
) -> dict[str, str]:
    """Attributes of the embed tag, omitting unset optional ones."""
    if not site_id:
        raise ValueError("site_id is required")

    attrs = {ATTR_SITE: site_id}
    if api_url:
        attrs[ATTR_API] = api_url
    if cross_domains:
        attrs[ATTR_CROSS_DOMAIN] = ",".join(cross_domains)
    if supabase_url:
        attrs[ATTR_SUPABASE_URL] = supabase_url
    return attrs


def script_tag(
    src: str,
    site_id: str,
    api_url: str | None = None,
    cross_domains: tuple[str, ...] | list[str] = (),
    supabase_url: str | None = None,
) -> str:
    """Generate the tracking script tag HTML for templates.

    Example:
        >>> script_tag("https://cdn.example.com/track.js", "site_123")
        '<script defer src="https://cdn.example.com/track.js" data-site="site_123"></script>'
    """
    attrs = script_attributes(site_id, api_url, cross_domains, supabase_url)
    rendered = "".join(f' {name}="{escape(value)}"' for name, value in attrs.items())
    return f'<script defer src="{escape(src)}"{rendered}></script>'
