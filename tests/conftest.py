"""Shared test fixtures for homelab-bridge tests.

- target: MockTarget simulating the monitored system
- telemetry: BridgeTelemetry on a private registry
- bridge: A Bridge wired to the mock target
"""

import logging
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from prometheus_client import CollectorRegistry

from homelab_bridge.datasource import Bridge
from homelab_bridge.shared.logging import CHATTY_LOGGERS
from homelab_bridge.telemetry import BridgeTelemetry
from tests.mocks import API_KEY, BASE_URL, MockTarget


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo configure_logging() calls made by CLI tests."""
    handlers = list(logging.root.handlers)
    level = logging.root.level
    library_levels = {name: logging.getLogger(name).level for name in CHATTY_LOGGERS}
    yield
    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)
    for name, library_level in library_levels.items():
        logging.getLogger(name).setLevel(library_level)


@pytest.fixture
def json_data() -> dict:
    return {"path": BASE_URL}


@pytest.fixture
def secure_json_data() -> dict:
    return {"apiKey": API_KEY}


@pytest.fixture
def target() -> MockTarget:
    return MockTarget()


@pytest.fixture
def telemetry() -> BridgeTelemetry:
    return BridgeTelemetry(registry=CollectorRegistry())


@pytest_asyncio.fixture
async def bridge(json_data, secure_json_data, target, telemetry) -> AsyncGenerator[Bridge, None]:
    bridge = Bridge.create(
        json_data,
        secure_json_data,
        telemetry=telemetry,
        transport=target.transport,
    )
    yield bridge
    await bridge.dispose()
