# tests/conftest.py
"""
Shared fixtures: an AaioHttpClient wired to httpx.MockTransport and a
sleep stub that records retry pauses instead of waiting.
"""
import json

import httpx
import pytest

from aaio_connect.transport import AaioHttpClient, RetryingTransport

API_KEY = "test-api-key"
BASE_URL = "https://aaio.test"


def json_response(status_code: int = 200, payload=None) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload or {}).encode("utf-8"))


class Recorder:
    """Collects requests seen by the mock transport and answers from a script."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def make_http():
    def _make(*responses) -> tuple:
        recorder = Recorder(responses)
        http = AaioHttpClient(API_KEY, base_url=BASE_URL, transport=httpx.MockTransport(recorder))
        return http, recorder

    return _make


@pytest.fixture
def make_retrying(make_http):
    def _make(*responses, max_retries: int = 3) -> tuple:
        http, recorder = make_http(*responses)
        sleeps = SleepRecorder()
        return RetryingTransport(http, max_retries=max_retries, sleep=sleeps), recorder, sleeps

    return _make
