"""
Configuration for the mmmetric tracker.

The tracker is configured by the attributes of the ``<script>`` tag that
embeds it. The collector side (pixel endpoint) is configured from the
environment of the hosted project.
"""
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Session settings
SESSION_TIMEOUT_MS = 30 * 60 * 1000
SESSION_PARAM = "_mm_sid"

# Timers
HEARTBEAT_INTERVAL_MS = 30_000
SCROLL_DEBOUNCE_MS = 200
DEFERRED_CHECK_MS = 1_000  # initial scroll check and 404 check

# Engagement bounds (seconds)
MIN_ENGAGEMENT_SECONDS = 5
MAX_ENGAGEMENT_SECONDS = 86_400

MAX_LINK_TEXT = 100

# Script tag attributes (embedding contract)
ATTR_SITE = "data-site"
ATTR_API = "data-api"
ATTR_CROSS_DOMAIN = "data-cross-domain"
ATTR_SUPABASE_URL = "data-supabase-url"

HOSTED_DOMAINS = ("supabase.co", "supabase.in")
TRACK_FUNCTION_PATH = "/functions/v1/track"


class CollectorConfigError(ValueError):
    """Raised when the collector environment is incomplete."""
    pass


@dataclass
class TrackerConfig:
    """Resolved configuration for a single tracker instance."""

    # Required
    site_id: str  # Tenant identifier
    api_url: str  # Collector endpoint

    # Optional
    cross_domains: tuple[str, ...] = field(default_factory=tuple)
    supabase_url: str | None = None

    def __post_init__(self):
        if not self.site_id:
            raise ValueError("site_id is required")
        if not self.api_url:
            raise ValueError("api_url is required")
        self.cross_domains = tuple(self.cross_domains)

    @property
    def config_url(self) -> str:
        """Endpoint serving the remote configuration document."""
        return self.api_url.replace("/track", "/get-config", 1)

    def is_cross_domain(self, hostname: str) -> bool:
        """Check if a host is eligible for session-id propagation."""
        return any(domain in hostname for domain in self.cross_domains)


def parse_cross_domains(value: str | None) -> tuple[str, ...]:
    """Split a comma separated host list, dropping blanks."""
    if not value:
        return ()
    return tuple(d.strip() for d in value.split(",") if d.strip())


def infer_api_url(script_src: str | None, supabase_url: str | None = None) -> str | None:
    """Derive the collector endpoint from the script's own load URL.

    Scripts served from a hosted project domain post to that project's
    track function. Otherwise the explicit project URL attribute is used.
    """
    if not script_src:
        return None
    try:
        parsed = urlparse(script_src)
        hostname = parsed.hostname or ""
    except ValueError:
        logger.debug(f"Ignoring malformed script src: {script_src!r}")
        return None

    if not parsed.scheme or not hostname:
        return None

    if any(domain in hostname for domain in HOSTED_DOMAINS):
        return f"{parsed.scheme}://{parsed.netloc}{TRACK_FUNCTION_PATH}"
    if supabase_url:
        return supabase_url + TRACK_FUNCTION_PATH
    return None


def resolve_config(
    attributes: Mapping[str, str],
    script_src: str | None = None,
) -> TrackerConfig | None:
    """Resolve tracker configuration from script tag attributes.

    Args:
        attributes: Attributes of the embedding script tag
        script_src: The script's load URL, used to infer the endpoint

    Returns:
        TrackerConfig, or None when the tenant id or the collector
        endpoint cannot be resolved (the tracker then does nothing).
    """
    site_id = attributes.get(ATTR_SITE)
    supabase_url = attributes.get(ATTR_SUPABASE_URL) or None
    api_url = attributes.get(ATTR_API) or infer_api_url(script_src, supabase_url)

    if not site_id or not api_url:
        logger.debug("Tracker disabled: missing site id or collector endpoint")
        return None

    return TrackerConfig(
        site_id=site_id,
        api_url=api_url,
        cross_domains=parse_cross_domains(attributes.get(ATTR_CROSS_DOMAIN)),
        supabase_url=supabase_url,
    )


@dataclass
class CollectorConfig:
    """Configuration for the collector-side pixel endpoint."""

    supabase_url: str
    service_role_key: str
    events_table: str = "events"

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1/{self.events_table}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CollectorConfig":
        """Build the config from SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.

        Raises:
            CollectorConfigError: If either variable is missing
        """
        env = os.environ if environ is None else environ
        url = env.get("SUPABASE_URL", "")
        key = env.get("SUPABASE_SERVICE_ROLE_KEY", "")
        missing = [name for name, value in (
            ("SUPABASE_URL", url),
            ("SUPABASE_SERVICE_ROLE_KEY", key),
        ) if not value]
        if missing:
            raise CollectorConfigError(
                f"Missing collector environment: {', '.join(missing)}"
            )
        return cls(supabase_url=url, service_role_key=key)
