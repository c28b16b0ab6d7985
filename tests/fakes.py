"""In-memory stand-ins for requests sessions and Jira configs used across tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

import requests

from jira_assist.config import DeploymentMode, JiraConfig

SERVER_BASE = "https://jira.example.com"
CLOUD_BASE = "https://example.atlassian.net"

REASONS = {200: "OK", 204: "No Content", 400: "Bad Request", 401: "Unauthorized",
           403: "Forbidden", 404: "Not Found", 500: "Internal Server Error"}


def make_response(
    status: int, payload: Any = None, headers: dict[str, str] | None = None, url: str = ""
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.reason = REASONS.get(status, "")
    response.encoding = "utf-8"
    if payload is None:
        response._content = b""
    else:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    response.headers.update(headers or {})
    return response


def not_found() -> requests.Response:
    return make_response(404, {"errorMessages": ["Not found"]})


@dataclass
class Call:
    method: str
    url: str
    headers: dict[str, str]
    json: Any = None
    params: Any = None


@dataclass
class FakeSession:
    """Routes (method, url) or url to a Response, an exception, or a callable(call)."""

    routes: dict[Any, Any] = field(default_factory=dict)
    calls: list[Call] = field(default_factory=list)
    closed: bool = False

    def route(self, url: str, handler: Any, method: str | None = None) -> None:
        self.routes[(method, url) if method else url] = handler

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        call = Call(method, url, dict(headers or {}), json, params)
        self.calls.append(call)
        handler = self.routes.get((method, url), self.routes.get(url))
        if handler is None:
            return not_found()
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(call)
        return handler

    def get(self, url, headers=None, timeout=None, **kwargs):
        return self.request("GET", url, headers=headers, timeout=timeout, **kwargs)

    def close(self) -> None:
        self.closed = True

    @property
    def urls(self) -> list[str]:
        return [c.url for c in self.calls]


def by_auth(responses: dict[str, requests.Response | Exception]) -> Callable[[Call], Any]:
    """Pick a response by Authorization scheme prefix ("Basic", "Bearer <secret>")."""

    def handler(call: Call) -> requests.Response:
        auth = call.headers.get("Authorization", "")
        for prefix, response in responses.items():
            if auth == prefix or auth.split(" ")[0] == prefix:
                if isinstance(response, Exception):
                    raise response
                return response
        return make_response(401, {"errorMessages": ["Unauthorized"]})

    return handler


def server_config(**overrides: Any) -> JiraConfig:
    values = dict(
        base_url=SERVER_BASE,
        secret="pat-123",
        deployment_mode=DeploymentMode.SERVER,
        email="",
        project_key="",
        board_id="",
        story_points_field="",
        timeout=5,
    )
    values.update(overrides)
    return JiraConfig(**values)


def cloud_config(**overrides: Any) -> JiraConfig:
    values = dict(
        base_url=CLOUD_BASE,
        secret="api-token",
        deployment_mode=DeploymentMode.CLOUD,
        email="dev@example.com",
        project_key="",
        board_id="",
        story_points_field="",
        timeout=5,
    )
    values.update(overrides)
    return JiraConfig(**values)
