"""Shared fixtures for the Brigade SDK tests.

HTTP traffic never leaves the process: every transport client is wired to
an ``httpx.MockTransport`` whose handler records the requests it receives
and answers with responses queued by the test.
"""

import json
from typing import Any

import httpx
import pytest

from brigade_sdk.restapi import ClientConfig, TransportClient

BASE_URL = "https://brigade.example.com"
TOKEN = "test-token"


class RecordingHandler:
    """Mock transport handler replaying queued responses in order."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response] = []

    def respond(
        self,
        status_code: int = 200,
        json_body: Any = None,
        content: bytes | None = None,
    ) -> None:
        """Queue the response for the next request."""
        if json_body is not None:
            self._responses.append(httpx.Response(status_code, json=json_body))
        else:
            self._responses.append(httpx.Response(status_code, content=content or b""))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            msg = f"Unexpected request: {request.method} {request.url}"
            raise AssertionError(msg)
        return self._responses.pop(0)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def handler() -> RecordingHandler:
    """Handler with an empty response queue."""
    return RecordingHandler()


@pytest.fixture
def mock_transport(handler: RecordingHandler) -> httpx.MockTransport:
    """httpx transport routing every request to the recording handler."""
    return httpx.MockTransport(handler)


@pytest.fixture
def rest_client(mock_transport: httpx.MockTransport) -> TransportClient:
    """Token-bearing transport client talking to the mock transport."""
    return TransportClient(
        BASE_URL,
        ClientConfig(allow_insecure_tls=True),
        TOKEN,
        transport=mock_transport,
    )


@pytest.fixture
def anonymous_client(mock_transport: httpx.MockTransport) -> TransportClient:
    """Transport client without a bearer token, as used before login."""
    return TransportClient(
        BASE_URL,
        ClientConfig(allow_insecure_tls=True),
        transport=mock_transport,
    )
