"""Pytest configuration - loads .env for the live smoke tests, shared fakes."""

import json
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from backand_cli.core.auth import Session
from backand_cli.core.client import APIClient, TransportError, TransportResponse
from backand_cli.core.store import MemoryStore
from backand_cli.core.types import RequestDescriptor
from backand_cli.sdk import BackandClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class FakeTransport:
    """Transport that records requests and replays queued responses."""

    def __init__(self) -> None:
        self.requests: list[RequestDescriptor] = []
        self.responses: list[TransportResponse | Exception] = []

    def reply(self, data: Any = None, status: int = 200, raw: bytes | None = None) -> None:
        body = raw if raw is not None else (b"" if data is None else json.dumps(data).encode("utf-8"))
        self.responses.append(TransportResponse(status=status, body=body))

    def fail(self, message: str = "Connection error: refused") -> None:
        self.responses.append(TransportError(message))

    def send(self, request: RequestDescriptor, timeout: float) -> TransportResponse:
        self.requests.append(request)
        response = self.responses.pop(0) if self.responses else TransportResponse(status=200, body=b"{}")
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> RequestDescriptor:
        return self.requests[-1]

    def last_json(self) -> Any:
        body = self.last.body
        return json.loads(body) if body is not None else None


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session(store) -> Session:
    return Session(
        app_name="todos",
        anonymous_token="anon-123",
        sign_up_token="signup-456",
        base_url="https://api.example.test/",
        store=store,
    )


@pytest.fixture
def api_client(session, transport) -> APIClient:
    return APIClient(session, transport=transport)


@pytest.fixture
def client(store, transport, monkeypatch) -> BackandClient:
    for var in ("BACKAND_APP_NAME", "BACKAND_ANONYMOUS_TOKEN", "BACKAND_SIGNUP_TOKEN", "BACKAND_API_URL"):
        monkeypatch.delenv(var, raising=False)
    return BackandClient(
        app_name="todos",
        anonymous_token="anon-123",
        sign_up_token="signup-456",
        api_url="https://api.example.test",
        store=store,
        transport=transport,
    )
