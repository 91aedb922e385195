"""Test fixtures for the marketplace client."""
from typing import Any, Dict, List, Optional

import pytest


class FakeResponse:
    def __init__(self, status: int, payload: Optional[Dict[str, Any]] = None, text: str = ""):
        self.status = status
        self._payload = payload
        self._text = text

    async def json(self):
        return self._payload

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Records POSTs and replays queued responses (or raises queued errors)."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def post(self, url, json=None):
        self.requests.append({"url": url, "json": json})
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession
