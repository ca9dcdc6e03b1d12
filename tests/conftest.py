from __future__ import annotations

import io
import json
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

import pytest
import requests
from requests import PreparedRequest
from requests.adapters import BaseAdapter, HTTPAdapter
from urllib3 import HTTPResponse

from vanish.cancel import CancelToken
from vanish.client import VanishClient

BASE_URL = "https://vanish.test/api"


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


@dataclass
class Reply:
    status: int = 200
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(cls, payload: Any, status: int = 200) -> Reply:
        return cls(
            status=status,
            body=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )


Handler = Callable[[PreparedRequest], Reply]


class StubAdapter(BaseAdapter):
    """Answers requests from a handler instead of the network."""

    def __init__(self, handler: Handler) -> None:
        super().__init__()
        self.handler = handler
        self.requests: list[PreparedRequest] = []
        self.timeouts: list[Any] = []
        self.responses: list[requests.Response] = []
        self.closed: list[requests.Response] = []
        self._builder = HTTPAdapter()

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        reply = self.handler(request)
        raw = HTTPResponse(
            body=io.BytesIO(reply.body),
            headers=reply.headers,
            status=reply.status,
            decode_content=False,
            enforce_content_length=False,
            preload_content=False,
        )
        response = self._builder.build_response(request, raw)
        self._track_close(response)
        self.responses.append(response)
        return response

    def _track_close(self, response: requests.Response) -> None:
        release = response.close

        def close() -> None:
            self.closed.append(response)
            release()

        response.close = close

    def close(self) -> None:
        self._builder.close()


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeToken(CancelToken):
    """Token whose waits move a fake clock instead of sleeping."""

    def __init__(self, clock: FakeClock, timeout: float | None = None) -> None:
        super().__init__(timeout=timeout, clock=clock)
        self.fake_clock = clock
        self.waits: list[float] = []

    def wait(self, seconds: float) -> bool:
        if self.cancelled:
            return True
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self.waits.append(seconds)
        self.fake_clock.advance(seconds)
        return self.cancelled


@pytest.fixture
def make_client() -> Iterator[Callable[..., tuple[VanishClient, StubAdapter]]]:
    clients: list[VanishClient] = []

    def factory(handler: Handler, **kwargs: Any) -> tuple[VanishClient, StubAdapter]:
        adapter = StubAdapter(handler)
        session = requests.Session()
        session.mount("https://", adapter)
        client = VanishClient(BASE_URL, session=session, **kwargs)
        clients.append(client)
        return client, adapter

    yield factory
    for client in clients:
        client.session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
