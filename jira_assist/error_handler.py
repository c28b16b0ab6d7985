#!/usr/bin/env python3
"""
Error handling for MCP tool functions.
Turns client errors into AI-agent friendly JSON and attaches an auth diagnosis to 401s.
"""
import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from jira_assist.errors import (
    Cancelled,
    ConfigInvalid,
    JiraAssistError,
    RequestFailed,
)

P = ParamSpec("P")
R = TypeVar("R")


class JiraErrorHandler:
    """Builds error payloads; runs auth diagnostics when a request fails with 401."""

    def __init__(self, logger: logging.Logger, client_getter: Callable[[], Any] | None = None):
        self.logger = logger
        self.client_getter = client_getter

    def handle(self, error: Exception, func_name: str) -> dict[str, Any]:
        """
        Convert an exception raised by a tool into a payload.

        Args:
            error: The exception
            func_name: Name of the tool function

        Returns:
            Dictionary with error information and suggestions
        """
        if isinstance(error, Cancelled):
            self.logger.debug(f"{func_name} cancelled")
            return {"cancelled": True}

        if isinstance(error, ConfigInvalid):
            self.logger.error(f"Configuration error in {func_name}: {error}")
            return error.to_dict()

        if isinstance(error, RequestFailed):
            self.logger.error(f"HTTP error in {func_name}: {error}")
            payload = error.to_dict()
            if error.status == 401:
                payload["diagnosis"] = self._diagnose(error)
            return payload

        if isinstance(error, JiraAssistError):
            self.logger.error(f"{error.error_type} in {func_name}: {error}")
            return error.to_dict()

        if isinstance(error, ValueError):
            self.logger.error(f"Validation error in {func_name}: {error}")
            return {"error": f"Validation error in {func_name}: {error}", "type": "validation"}

        self.logger.exception(f"Unexpected error in {func_name}: {error}")
        return {"error": f"Unexpected error in {func_name}: {error}", "type": "unexpected"}

    def _diagnose(self, error: RequestFailed) -> dict[str, Any] | None:
        client = self.client_getter() if self.client_getter else None
        if client is None:
            return None
        try:
            diagnosis = client.diagnose(real_failure=error)
        except Cancelled:
            return None
        return diagnosis.to_dict()


def handle_errors(
    logger: logging.Logger | None = None,
    client_getter: Callable[[], Any] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, str]]:
    """
    Decorator for handling errors in MCP tool functions.

    Args:
        logger: Optional logger instance
        client_getter: Returns the active JiraClient, used for 401 diagnostics

    Returns:
        Decorated function that returns JSON with error handling
    """

    def decorator(func: Callable[P, R]) -> Callable[P, str]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> str:
            handler = JiraErrorHandler(logger or logging.getLogger(func.__module__), client_getter)
            try:
                result = func(*args, **kwargs)
                return result if isinstance(result, str) else json.dumps(result, indent=2)
            except Exception as e:
                return json.dumps(handler.handle(e, func.__name__), indent=2)

        return wrapper

    return decorator
