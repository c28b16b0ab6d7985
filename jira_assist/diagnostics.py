#!/usr/bin/env python3
"""
Authentication diagnostics for Jira.

When a request fails with 401, a fixed matrix of trial requests against
/rest/api/2/myself tells the operator which auth mode and URL shape work:

    cloud           Basic email:token, configured base URL
    server          Bearer PAT, configured base URL
    server_subpath  Bearer PAT, base URL + /jira (skipped if already present)
    control         Bearer with a deliberately corrupted PAT

The control probe fingerprints what a definitely-wrong credential looks like
on this server, so a real failure with the same signature points at an
expired token or a proxy stripping the Authorization header.
"""
import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

import requests

from jira_assist.auth import JSON_HEADERS, basic_auth_value, bearer_auth_value
from jira_assist.base_client import parse_error_response
from jira_assist.cancellation import CancelToken, check_cancelled
from jira_assist.config import SERVER_SUBPATH, DeploymentMode, JiraConfig
from jira_assist.errors import RequestFailed

logger = logging.getLogger(__name__)

PROBE_PATH = "/rest/api/2/myself"
CONTROL_SECRET_SUFFIX = "-invalid"

CLOUD = "cloud"
SERVER = "server"
SERVER_SUBPATH_PROBE = "server_subpath"
CONTROL = "control"


@dataclass(frozen=True)
class ProbeResult:
    ok: bool
    http_status: int | None = None
    error_hint: str | None = None
    server_auth_challenge: str | None = None
    skipped: bool = False

    def signature(self) -> tuple[int | None, str | None, str | None]:
        return (self.http_status, self.error_hint, self.server_auth_challenge)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class Verdict(str, Enum):
    SWITCH_TO_CLOUD = "switch_to_cloud"
    SWITCH_TO_SERVER = "switch_to_server"
    APPEND_SUBPATH = "append_subpath"
    NO_AUTH_MODE_WORKS = "no_auth_mode_works"
    INCONCLUSIVE = "inconclusive"


KNOWN_BAD_HINT = (
    "The credential is rejected exactly like a known-bad token. It is likely expired or "
    "invalid, or the Authorization header is being stripped by a proxy in front of Jira."
)


@dataclass
class Diagnosis:
    verdict: Verdict
    message: str
    suggested_settings: dict[str, str] = field(default_factory=dict)
    hints: list[str] = field(default_factory=list)
    probes: dict[str, ProbeResult] = field(default_factory=dict)
    real_failure: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "message": self.message,
            "suggested_settings": dict(self.suggested_settings),
            "hints": list(self.hints),
            "probes": {name: probe.to_dict() for name, probe in self.probes.items()},
            "real_failure": self.real_failure,
        }


def _matches_control(real_failure: RequestFailed | None, control: ProbeResult) -> bool:
    if real_failure is None:
        return False
    # Empty bodies compare as None on both sides
    real = (real_failure.status, real_failure.detail or None)
    return real == (control.http_status, control.error_hint)


def diagnose(
    probes: dict[str, ProbeResult],
    config: JiraConfig,
    real_failure: RequestFailed | None = None,
) -> tuple[Verdict, str, dict[str, str], list[str]]:
    """Apply the diagnosis rules in order; the first rule that fires wins."""
    cloud = probes[CLOUD]
    server = probes[SERVER]
    subpath = probes[SERVER_SUBPATH_PROBE]
    control = probes[CONTROL]
    current = config.deployment_mode.value if config.deployment_mode else "unset"

    if cloud.ok and not server.ok:
        return (
            Verdict.SWITCH_TO_CLOUD,
            f"Jira Cloud basic auth works; switch deployment mode to cloud (currently {current}).",
            {"JIRA_DEPLOYMENT": DeploymentMode.CLOUD.value},
            [],
        )

    if server.ok and not cloud.ok:
        return (
            Verdict.SWITCH_TO_SERVER,
            "Server/Data Center bearer auth works; switch deployment mode to server "
            f"(currently {current}).",
            {"JIRA_DEPLOYMENT": DeploymentMode.SERVER.value},
            [],
        )

    if not server.ok and subpath.ok:
        healed = f"{config.base_url}{SERVER_SUBPATH}"
        return (
            Verdict.APPEND_SUBPATH,
            f"Jira answers under {SERVER_SUBPATH}; set the base URL to {healed}.",
            {"JIRA_BASE_URL": healed},
            [],
        )

    if not cloud.ok and not server.ok:
        hints: list[str] = []
        if not control.skipped and (
            control.signature() == server.signature()
            or _matches_control(real_failure, control)
        ):
            hints.append(KNOWN_BAD_HINT)
        return (
            Verdict.NO_AUTH_MODE_WORKS,
            "Neither cloud basic auth nor server bearer auth is accepted with the configured "
            "credential. Create a new API token / PAT and check JIRA_EMAIL and JIRA_BASE_URL.",
            {},
            hints,
        )

    return (
        Verdict.INCONCLUSIVE,
        "Both auth modes were accepted on /myself; the failing request is likely restricted "
        "for this user rather than misconfigured.",
        {},
        [],
    )


class AuthDiagnosticsProbe:
    """Runs the probe matrix sequentially; one probe failing never aborts the others."""

    def __init__(
        self,
        config: JiraConfig,
        session: requests.Session | None = None,
        timeout: int | None = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.timeout = timeout or config.timeout

    def probe(self, url: str, authorization: str) -> ProbeResult:
        """
        Run one trial request.

        Args:
            url: Absolute URL to GET
            authorization: Authorization header value

        Returns:
            ProbeResult; transport errors become ok=False with "network error"
        """
        headers = dict(JSON_HEADERS)
        headers["Authorization"] = authorization
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.debug(f"Probe {url} network error: {e}")
            return ProbeResult(ok=False, error_hint="network error")

        logger.debug(f"Probe {url} -> {response.status_code}")
        if 200 <= response.status_code < 300:
            return ProbeResult(ok=True, http_status=response.status_code)

        return ProbeResult(
            ok=False,
            http_status=response.status_code,
            error_hint=parse_error_response(response) or None,
            server_auth_challenge=response.headers.get("WWW-Authenticate"),
        )

    def run_probes(self, cancel: CancelToken | None = None) -> dict[str, ProbeResult]:
        base = self.config.base_url
        secret = self.config.secret
        canonical = f"{base}{PROBE_PATH}"
        results: dict[str, ProbeResult] = {}

        check_cancelled(cancel)
        if self.config.email:
            results[CLOUD] = self.probe(canonical, basic_auth_value(self.config.email, secret))
        else:
            results[CLOUD] = ProbeResult(
                ok=False, error_hint="JIRA_EMAIL not configured", skipped=True
            )

        check_cancelled(cancel)
        results[SERVER] = self.probe(canonical, bearer_auth_value(secret))

        check_cancelled(cancel)
        if base.lower().endswith(SERVER_SUBPATH):
            results[SERVER_SUBPATH_PROBE] = ProbeResult(
                ok=False, error_hint="not applicable", skipped=True
            )
        else:
            results[SERVER_SUBPATH_PROBE] = self.probe(
                f"{base}{SERVER_SUBPATH}{PROBE_PATH}", bearer_auth_value(secret)
            )

        check_cancelled(cancel)
        results[CONTROL] = self.probe(
            canonical, bearer_auth_value(f"{secret}{CONTROL_SECRET_SUFFIX}")
        )
        return results

    def run(
        self,
        real_failure: RequestFailed | None = None,
        cancel: CancelToken | None = None,
    ) -> Diagnosis:
        """
        Run all probes and interpret them.

        Args:
            real_failure: The 401 that triggered the diagnosis, if any
            cancel: Optional cancellation token

        Returns:
            Structured diagnosis
        """
        logger.info(f"Running auth diagnostics against {self.config.base_url}")
        probes = self.run_probes(cancel)
        verdict, message, settings, hints = diagnose(probes, self.config, real_failure)
        logger.info(f"Auth diagnosis: {verdict.value}")

        failure = None
        if real_failure is not None:
            failure = {
                "status_code": real_failure.status,
                "url": real_failure.url,
                "detail": real_failure.detail,
            }
        return Diagnosis(
            verdict=verdict,
            message=message,
            suggested_settings=settings,
            hints=hints,
            probes=probes,
            real_failure=failure,
        )
