"""Shared fixtures for tracker tests."""

import pytest

from mmmetric.core.agent import Features, TrackingAgent
from mmmetric.core.headless import HeadlessPage
from mmmetric.core.transport import RecordingTransport

SITE_ID = "site_123"
API_URL = "https://collector.example.com/track"


@pytest.fixture
def page():
    """A loaded page on example.com, taller than the viewport."""
    return HeadlessPage("https://example.com/home", scroll_height=2000, viewport_height=800)


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def start_agent(transport):
    """Start an agent on a page with the default embed attributes."""

    def _start(page, features: Features | None = None, **attributes) -> TrackingAgent:
        attrs = {"data-site": SITE_ID, "data-api": API_URL}
        attrs.update({f"data-{k.replace('_', '-')}": v for k, v in attributes.items()})
        agent = TrackingAgent.start(page, transport, attrs, features=features)
        assert agent is not None
        return agent

    return _start
