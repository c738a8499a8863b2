"""Test utilities for tether: an in-process ASGI client and a mock API client.

    from tether.testing import MockClient, TestClient, mock_sequence
"""

from tether.testing.client import TestClient
from tether.testing.mock import MockCall, MockClient, SequenceExhausted, mock_sequence

__all__ = ["MockCall", "MockClient", "SequenceExhausted", "TestClient", "mock_sequence"]
