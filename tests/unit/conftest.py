"""Shared fixtures for unit tests."""

import os
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest

from licensechain.api.pipeline import RequestPipeline
from licensechain.client import LicenseChainClient
from licensechain.config import Configuration, reset_settings

API_KEY = "lc_test_key"
BASE_URL = "https://api.test.licensechain.app"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep LICENSECHAIN_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("LICENSECHAIN_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


Reply = Union[Exception, Callable[[httpx.Request], httpx.Response]]


class FakeAPI:
    """Scripted stand-in for the LicenseChain API behind httpx.MockTransport.

    Replies are consumed in order; the last one repeats once the script runs out.
    """

    def __init__(self) -> None:
        self.replies: List[Reply] = []
        self.requests: List[httpx.Request] = []

    def reply(
        self,
        status_code: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> "FakeAPI":
        def respond(request: httpx.Request) -> httpx.Response:
            if content is not None:
                return httpx.Response(status_code, content=content, headers=headers)
            return httpx.Response(
                status_code, json=json if json is not None else {}, headers=headers
            )

        self.replies.append(respond)
        return self

    def fail(self, error: Exception) -> "FakeAPI":
        self.replies.append(error)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            return httpx.Response(200, json={})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def fake_api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def sleeps() -> List[float]:
    """Records the delays the pipeline waits between retries."""
    return []


@pytest.fixture
def config() -> Configuration:
    return Configuration(api_key=API_KEY, base_url=BASE_URL, retry_count=3, retry_delay=1.0)


@pytest.fixture
def pipeline(config, fake_api, sleeps) -> RequestPipeline:
    http_client = httpx.Client(transport=httpx.MockTransport(fake_api))
    yield RequestPipeline(config, http_client=http_client, sleep=sleeps.append)
    http_client.close()


@pytest.fixture
def client(config, fake_api, sleeps) -> LicenseChainClient:
    http_client = httpx.Client(transport=httpx.MockTransport(fake_api))
    yield LicenseChainClient(config, http_client=http_client, sleep=sleeps.append)
    http_client.close()
