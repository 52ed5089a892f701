"""Fixtures for provider tests."""

import httpx
import pytest


@pytest.fixture
def mock_http_factory():
    """Factory for an httpx.AsyncClient backed by a canned handler.

    The returned list collects every request the client sent.

    Example:
        client, requests = mock_http_factory(200, {"id": "msg-1"})
        provider = ResendProvider("key", client=client)
    """

    def _factory(status_code=200, body=None, headers=None, error=None):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if error is not None:
                raise error
            return httpx.Response(status_code, json=body or {}, headers=headers)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return client, requests

    return _factory
