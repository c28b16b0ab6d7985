#!/usr/bin/env python3
"""
Error types raised by the Jira client.
Every error carries an AI-agent friendly payload via to_dict().
"""
from typing import Any


class JiraAssistError(Exception):
    """Base class for all client errors."""

    error_type = "error"

    def suggestion(self) -> str | None:
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert error to the JSON envelope returned by tools."""
        payload: dict[str, Any] = {"error": str(self), "type": self.error_type}
        suggestion = self.suggestion()
        if suggestion:
            payload["suggestion"] = suggestion
        return payload


class ConfigInvalid(JiraAssistError):
    """Raised when configuration is invalid. Never retried."""

    error_type = "config_invalid"

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or [message]

    def suggestion(self) -> str | None:
        return "Fix the listed settings in your environment or .env file and restart."

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["problems"] = self.problems
        return payload


class NetworkFailure(JiraAssistError):
    """Transport-level failure (DNS, TLS, connection reset, timeout)."""

    error_type = "network_error"

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Network error calling {url}: {reason}")
        self.url = url
        self.reason = reason

    def suggestion(self) -> str | None:
        return "network error - check connectivity, VPN and proxy settings for the Jira host"


# Hints keyed by the last observed HTTP status
STATUS_HINTS: dict[int, str] = {
    401: "check credential (API token / PAT)",
    403: "missing access",
    404: "resource not found, check base URL (often missing /jira)",
}


class RequestFailed(JiraAssistError):
    """Non-2xx outcome after the candidate URLs were tried."""

    error_type = "http_error"

    def __init__(
        self,
        status: int,
        url: str | None = None,
        detail: str | None = None,
        hint: str | None = None,
    ) -> None:
        self.status = status
        self.url = url
        self.detail = detail
        self.hint = hint if hint is not None else STATUS_HINTS.get(status)

        message = f"Jira API error ({status})"
        if self.hint:
            message += f" - {self.hint}"
        if detail:
            message += f": {detail}"
        super().__init__(message)

    def suggestion(self) -> str | None:
        return self.hint

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["status_code"] = self.status
        if self.url:
            payload["url"] = self.url
        return payload


class NoMatchingTransition(JiraAssistError):
    """No live transition matches any of the requested status phrases."""

    error_type = "no_matching_transition"

    def __init__(
        self,
        issue_key: str,
        targets: list[str],
        available: list[tuple[str, str]],
    ) -> None:
        self.issue_key = issue_key
        self.targets = list(targets)
        self.available = list(available)

        listed = ", ".join(f'"{name}" → {to_name}' for name, to_name in self.available)
        super().__init__(
            f"No transition for [{' / '.join(self.targets)}] on {issue_key}. "
            f"Available transitions: {listed or 'none'}"
        )

    def suggestion(self) -> str | None:
        return "Pick one of the available transitions and retry with its name or destination."

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["issue_key"] = self.issue_key
        payload["targets"] = self.targets
        payload["available_transitions"] = [
            {"name": name, "to": to_name} for name, to_name in self.available
        ]
        return payload


class Cancelled(JiraAssistError):
    """The caller cancelled the operation. Not user-visible."""

    error_type = "cancelled"

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)
