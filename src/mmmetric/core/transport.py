"""
Best-effort event delivery.

Events are sent with no acknowledgment, no retry and no local queue. A
beacon-style send is tried first; when it is rejected or unavailable a
keepalive request is issued instead. Nothing here raises into the caller,
and nothing waits for the collector to answer.
"""
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import httpx

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain;charset=UTF-8"


class Transport(ABC):
    """Network primitives used by the tracker."""

    @abstractmethod
    def send_beacon(self, url: str, body: str) -> bool:
        """Queue a text/plain POST that survives page unload.

        Returns False if the send was not accepted.
        """

    @abstractmethod
    def fetch(self, url: str, body: str, keepalive: bool = True) -> None:
        """Issue a POST without waiting on the page transition."""

    @abstractmethod
    def fetch_json(self, url: str, payload: dict, callback: Callable[[Any], None]) -> None:
        """POST a JSON body; ``callback`` receives the decoded response."""

    def close(self) -> None:
        """Release network resources."""


def deliver(transport: Transport, url: str, body: str) -> None:
    """Send one event, preferring the beacon and falling back to fetch."""
    try:
        if transport.send_beacon(url, body):
            return
    except Exception as e:
        logger.debug(f"Beacon send failed: {e}")

    try:
        transport.fetch(url, body, keepalive=True)
    except Exception as e:
        logger.debug(f"Event dropped, fetch failed: {e}")


class HttpxTransport(Transport):
    """Transport over httpx, for running the tracker outside a browser.

    Requests go out in order on one background thread and every method
    returns once its request is queued. Call ``close()`` when done to send
    what is still queued and release the client.
    """

    def __init__(self, timeout: float = 5.0, client: httpx.Client | None = None):
        self._client = client or httpx.Client(timeout=timeout)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mmmetric-send")

    def _submit(self, fn, *args) -> bool:
        try:
            self._executor.submit(fn, *args)
        except RuntimeError:
            # shut down
            return False
        return True

    def _post(self, url: str, body: str, headers: dict) -> None:
        try:
            response = self._client.post(url, content=body.encode(), headers=headers)
        except httpx.HTTPError as e:
            logger.debug(f"Event dropped, POST {url} failed: {e}")
            return
        if response.is_error:
            logger.debug(f"Collector rejected event: {response.status_code}")

    def _post_json(self, url: str, payload: dict, callback: Callable[[Any], None]) -> None:
        try:
            response = self._client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Request to {url} failed: {e}")
            return
        callback(data)

    def send_beacon(self, url: str, body: str) -> bool:
        return self._submit(self._post, url, body, {"Content-Type": TEXT_PLAIN})

    def fetch(self, url: str, body: str, keepalive: bool = True) -> None:
        headers = {"Content-Type": TEXT_PLAIN}
        if keepalive:
            headers["Connection"] = "keep-alive"
        if not self._submit(self._post, url, body, headers):
            raise RuntimeError("Transport is closed")

    def fetch_json(self, url: str, payload: dict, callback: Callable[[Any], None]) -> None:
        if not self._submit(self._post_json, url, payload, callback):
            raise RuntimeError("Transport is closed")

    def flush(self, timeout: float | None = None) -> None:
        """Block until every request queued so far has completed."""
        try:
            marker = self._executor.submit(lambda: None)
        except RuntimeError:
            return
        marker.result(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._client.close()


class RecordingTransport(Transport):
    """Keeps every delivered body in memory.

    ``beacon_result`` controls what the beacon reports; set
    ``beacon_error``/``fetch_error`` to make either primitive raise.
    ``config`` is passed to the ``fetch_json`` callback, or raised if it is
    an exception.
    """

    def __init__(
        self,
        beacon_result: bool = True,
        beacon_error: Exception | None = None,
        fetch_error: Exception | None = None,
        config: Any = None,
    ):
        self.beacon_result = beacon_result
        self.beacon_error = beacon_error
        self.fetch_error = fetch_error
        self.config = config if config is not None else {}
        self.beacons: list[tuple[str, str]] = []
        self.fetches: list[tuple[str, str, bool]] = []
        self.config_requests: list[tuple[str, dict]] = []
        self.events: list[dict] = []  # decoded bodies in send order
        self.closed = False

    def send_beacon(self, url: str, body: str) -> bool:
        if self.beacon_error is not None:
            raise self.beacon_error
        if self.beacon_result:
            self.beacons.append((url, body))
            self.events.append(json.loads(body))
        return self.beacon_result

    def fetch(self, url: str, body: str, keepalive: bool = True) -> None:
        if self.fetch_error is not None:
            raise self.fetch_error
        self.fetches.append((url, body, keepalive))
        self.events.append(json.loads(body))

    def fetch_json(self, url: str, payload: dict, callback: Callable[[Any], None]) -> None:
        self.config_requests.append((url, payload))
        if isinstance(self.config, Exception):
            raise self.config
        callback(self.config)

    def close(self) -> None:
        self.closed = True

    def named(self, event_name: str) -> list[dict]:
        """Delivered events with the given name."""
        return [e for e in self.events if e["event_name"] == event_name]

    def clear(self) -> None:
        self.beacons.clear()
        self.fetches.clear()
        self.events.clear()
