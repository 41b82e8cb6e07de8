"""Shared fixtures: stand-ins for requests sessions and responses."""

import json
from typing import Any, Dict, Iterable, List, Optional

import pytest
import requests


class FakeResponse:
    """Minimal requests.Response stand-in."""

    def __init__(self,
                 status_code: int = 200,
                 body: Any = None,
                 blocks: Optional[Iterable[bytes]] = None,
                 text: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self._body = body
        self._blocks = blocks
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")
        self.headers = headers or {}
        self.closed = False
        self.blocks_read = 0

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._body is None:
            return json.loads(self.text)
        return self._body

    def iter_content(self, chunk_size=None):
        for block in self._blocks or []:
            if isinstance(block, Exception):
                raise block
            self.blocks_read += 1
            yield block

    def close(self):
        self.closed = True


class FakeSession:
    """Records posts and answers them with queued FakeResponses."""

    def __init__(self, responses: List[Any]):
        self.responses = list(responses)
        self.posts: List[Dict[str, Any]] = []
        self.closed = False

    def post(self, url, **kwargs):
        self.posts.append({"url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    """Factory: fake_session(resp1, resp2, ...)."""
    def _make(*responses):
        return FakeSession(list(responses))
    return _make


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
