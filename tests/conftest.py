"""Test fixtures for fleetctl."""

import asyncio
import json
import re
import socket
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

import pytest
import uvicorn
from pydantic import BaseModel
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from fleetctl.backend_types import Release, Tag
from fleetctl.client import FleetClient
from fleetctl.context import CLIENT

# =============================================================================
# Default test data factories
# =============================================================================


def make_tag(tag_key: str = "mySimpleTag", value: str = "", id: int | None = 1) -> Tag:
    """Create a test Tag."""
    return Tag(id=id, tag_key=tag_key, value=value)


def make_release(
    id: int = 1234,
    commit: str = "b376b0e544e9429483b656490e5b9443b4349bd6",
    status: str | None = "success",
) -> Release:
    """Create a test Release."""
    return Release(id=id, commit=commit, status=status)


# =============================================================================
# FakeResponse - HTTP-like response configuration
# =============================================================================


@dataclass
class FakeResponse:
    """HTTP-like response for fake server.

    Attributes:
        http_status: HTTP status code
        body: Response body (BaseModel, list, dict, str, or None)
        headers: Response headers as tuple of (name, value) pairs
    """

    http_status: HTTPStatus = HTTPStatus.OK
    body: BaseModel | list | dict | str | None = None
    headers: tuple[tuple[str, str], ...] = ()


@dataclass
class RecordedRequest:
    """A request received by the fake server."""

    method: str
    path: str
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None


# Type alias for fake responses dictionary
FakeResponses = dict[str, FakeResponse]


# =============================================================================
# RouteMatcher - Match URL patterns with path parameters
# =============================================================================


class RouteMatcher:
    """Match request URIs against fake_responses patterns.

    Converts patterns like "GET /releases/{id}" to regex that matches
    "GET /releases/1234".
    """

    _PARAM_PATTERN = re.compile(r"\{([^}]+)\}")

    def __init__(self, responses: FakeResponses):
        self._responses = responses
        self._compiled: list[tuple[re.Pattern[str], str]] = []
        for pattern in self._responses:
            method, path = pattern.split(" ", 1)
            regex = re.compile(f"^{re.escape(method)} {self._path_to_regex(path)}$")
            self._compiled.append((regex, pattern))

    def _path_to_regex(self, path: str) -> str:
        result = ""
        last_end = 0
        for match in self._PARAM_PATTERN.finditer(path):
            result += re.escape(path[last_end : match.start()])
            result += "([^/]+)"
            last_end = match.end()
        result += re.escape(path[last_end:])
        return result

    def match(self, method: str, path: str) -> FakeResponse | None:
        uri = f"{method} {path}"

        if uri in self._responses:
            return self._responses[uri]

        for regex, pattern in self._compiled:
            if regex.match(uri):
                return self._responses[pattern]

        return None


# =============================================================================
# Fixtures - Real HTTP fake server
# =============================================================================


@pytest.fixture
def fake_server_socket() -> socket.socket:
    """Create a bound socket for the fake server."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    return sock


@pytest.fixture
def fake_server_url(fake_server_socket: socket.socket) -> str:
    """URL for the fake server."""
    _, port = fake_server_socket.getsockname()
    return f"http://127.0.0.1:{port}"


@pytest.fixture
def recorded_requests() -> list[RecordedRequest]:
    """Requests received by the fake server, in order."""
    return []


def _convert_pydantic(obj: Any) -> Any:
    """Recursively convert pydantic models to dicts."""
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, dict):
        return {k: _convert_pydantic(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_pydantic(item) for item in obj]
    return obj


def _serialize_body(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, BaseModel):
        return body.model_dump_json()
    if isinstance(body, (list, dict)):
        return json.dumps(_convert_pydantic(body))
    return str(body)


@pytest.fixture
async def http_fake_server(
    fake_responses: FakeResponses,
    fake_server_socket: socket.socket,
    recorded_requests: list[RecordedRequest],
) -> AsyncIterator[None]:
    """Real HTTP server returning configured fake responses."""
    matcher = RouteMatcher(fake_responses)

    async def handle_request(request: Request) -> Response:
        method = request.method
        # Strip /v1 prefix since FleetClient adds it
        path = request.url.path
        if path.startswith("/v1"):
            path = path[3:]

        raw_body = await request.body()
        recorded_requests.append(
            RecordedRequest(
                method=method,
                path=path,
                params=dict(request.query_params),
                headers=dict(request.headers),
                json=json.loads(raw_body) if raw_body else None,
            )
        )

        fake_response = matcher.match(method, path)
        if fake_response is None:
            return Response(
                content=json.dumps({"error": f"No fake response for {method} {path}"}),
                status_code=404,
                media_type="application/json",
            )

        headers = dict(fake_response.headers)
        if "content-type" not in {k.lower() for k in headers}:
            if isinstance(fake_response.body, str) and not fake_response.body.startswith("{"):
                headers["Content-Type"] = "text/plain"
            else:
                headers["Content-Type"] = "application/json"

        return Response(
            content=_serialize_body(fake_response.body),
            status_code=fake_response.http_status.value,
            headers=headers,
        )

    app = Starlette(
        routes=[
            Route(
                "/{path:path}",
                endpoint=handle_request,
                methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            ),
        ],
    )

    config = uvicorn.Config(app, log_level="error")
    server = uvicorn.Server(config)
    server_task = asyncio.create_task(server.serve(sockets=[fake_server_socket]))

    yield

    server.should_exit = True
    await server_task


@pytest.fixture
async def fleet_client(http_fake_server: None, fake_server_url: str) -> AsyncIterator[FleetClient]:
    """Real FleetClient pointing to the fake HTTP server."""
    async with FleetClient(base_url=fake_server_url, token="test-token") as client:
        CLIENT.set(client)
        yield client


@pytest.fixture
def fake_responses() -> FakeResponses:
    """Default empty fake responses for tests that don't configure any."""
    return {}
