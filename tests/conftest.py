from __future__ import annotations

import json
from typing import Callable

import httpx
import pytest

from core.config import AppSettings
from core.domain.auth import UserAuth
from core.services.login_signal import LoginSignal
from adapters.http_backend import HttpBackendService

ENDPOINT = "https://api.example.com/v1"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keeps tests away from the developer's .env files and AVHELP_* vars."""

    for name in ("ENDPOINT", "USERNAME", "LIVE_AUTH", "LOCATION_ENABLED", "HTTP_TIMEOUT_SECONDS"):
        monkeypatch.delenv(f"AVHELP_{name}", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def endpoint() -> str:
    return ENDPOINT


@pytest.fixture
def settings(endpoint) -> AppSettings:
    return AppSettings(_env_file=None, endpoint=endpoint)


class Recorder:
    """MockTransport handler that records requests and replays a canned reply."""

    def __init__(self, status_code: int = 200, body: object | bytes | None = None) -> None:
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []
        self.error: Callable[[httpx.Request], Exception] | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(request)
        if self.body is None:
            return httpx.Response(self.status_code)
        if isinstance(self.body, bytes):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, content=json.dumps(self.body).encode("utf-8"))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def user_auth() -> UserAuth:
    return UserAuth(username="ana", live_auth=False)


@pytest.fixture
def login_events() -> list[str]:
    return []


@pytest.fixture
def login_signal(login_events) -> LoginSignal:
    signal = LoginSignal()
    signal.subscribe(login_events.append)
    return signal


@pytest.fixture
def backend(endpoint, settings, user_auth, login_signal, recorder) -> HttpBackendService:
    return HttpBackendService(
        endpoint,
        user_auth,
        login_signal,
        settings=settings,
        transport=httpx.MockTransport(recorder),
    )
