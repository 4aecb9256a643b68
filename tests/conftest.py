from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
import pytest

from mystat.app.config import ClientSettings
from mystat.domain.models import Credential, Session
from mystat.services.portal import MystatClient

API_PREFIX = "/api/v2/"
NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

Route = Callable[[httpx.Request], httpx.Response]


class FakePortal:
    """In-memory stand-in for the MyStat API served through MockTransport."""

    def __init__(self, *, expires_in: int = 3600) -> None:
        self.expires_in = expires_in
        self.login_calls = 0
        self.login_bodies: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Any] = {}
        self.rejected_tokens: set[str] = set()
        self.reject_all = False
        self.login_route: Route | None = None

    @staticmethod
    def path_of(request: httpx.Request) -> str:
        return request.url.path[len(API_PREFIX):]

    def api_requests(self, path: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if self.path_of(r) != "auth/login" and (path is None or self.path_of(r) == path)
        ]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self.path_of(request)
        if path == "auth/login":
            self.login_calls += 1
            self.login_bodies.append(json.loads(request.content))
            # Let concurrent callers run while the login is in flight
            await asyncio.sleep(0)
            if self.login_route is not None:
                return self.login_route(request)
            return httpx.Response(
                200,
                json={
                    "access_token": f"token-{self.login_calls}",
                    "refresh_token": "refresh",
                    "expires_in_access": self.expires_in,
                    "expires_in_refresh": self.expires_in * 2,
                    "user_type": 0,
                },
            )

        token = request.headers.get("authorization", "").removeprefix("Bearer ")
        if self.reject_all or token in self.rejected_tokens:
            return httpx.Response(401, json={"name": "Unauthorized", "status": 401})

        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"message": f"Unknown path {path}"})
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal()


@pytest.fixture
def credential() -> Credential:
    return Credential("student", "s3cret")


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(base_url="https://msapi.test/api/v2", timeout_seconds=5)


@pytest.fixture
def make_client(portal: FakePortal, credential: Credential, settings: ClientSettings):
    def _make(**kwargs: Any) -> MystatClient:
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("clock", lambda: NOW)
        return MystatClient(credential, transport=portal.transport(), **kwargs)

    return _make


@pytest.fixture
def valid_session() -> Session:
    return Session(
        token="cached-token",
        issued_at=NOW - timedelta(minutes=5),
        expires_at=NOW + timedelta(hours=1),
    )


@pytest.fixture
def expired_session() -> Session:
    return Session(
        token="stale-token",
        issued_at=NOW - timedelta(hours=2),
        expires_at=NOW - timedelta(hours=1),
    )


@pytest.fixture
def now() -> datetime:
    return NOW
