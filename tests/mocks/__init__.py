"""Test mocks for homelab-bridge.

Provides mock implementations for testing:
- MockTarget: Simulates the monitored system behind httpx.MockTransport
"""

from .target import API_KEY, BASE_URL, DEFAULT_METRICS, MockTarget, MockTargetState

__all__ = ["MockTarget", "MockTargetState", "API_KEY", "BASE_URL", "DEFAULT_METRICS"]
