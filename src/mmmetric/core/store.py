"""HTTP client for writing events into the hosted event store."""

import logging

import httpx

from ..config import CollectorConfig
from .models import PixelEvent

logger = logging.getLogger(__name__)


class EventStoreError(Exception):
    """Raised when the hosted store rejects an insert."""
    pass


class EventStore:
    """Inserts rows into the ``events`` table over the hosted REST API."""

    def __init__(self, config: CollectorConfig, timeout: float = 10.0):
        self.config = config
        self.timeout = timeout

    @property
    def headers(self) -> dict[str, str]:
        key = self.config.service_role_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }

    async def insert_event(self, event: PixelEvent) -> None:
        """Insert one event row."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.config.rest_url,
                headers=self.headers,
                json=event.model_dump(mode="json"),
            )
            if response.is_error:
                raise EventStoreError(
                    f"Event insert failed ({response.status_code}): {response.text}"
                )
        logger.debug(f"Recorded {event.event_name} for site {event.site_id}")
