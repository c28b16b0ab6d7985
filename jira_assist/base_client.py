#!/usr/bin/env python3
"""
Base client with URL-shape healing, error classification, and connection pooling.
"""
import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from jira_assist.auth import build_auth_headers
from jira_assist.cancellation import CancelToken, check_cancelled
from jira_assist.config import DeploymentMode, JiraConfig
from jira_assist.endpoints import EndpointResolver
from jira_assist.errors import NetworkFailure, RequestFailed


def parse_error_response(response: requests.Response) -> str:
    """
    Parse error response into a short message.

    Args:
        response: Response object with error

    Returns:
        Error message string
    """
    try:
        error_data = response.json()
    except ValueError:
        return response.text[:500]

    if not isinstance(error_data, dict):
        return response.text[:500]

    # Jira returns errors in various formats
    if error_data.get("errorMessages"):
        return " | ".join(str(msg) for msg in error_data["errorMessages"])

    if error_data.get("errors"):
        if isinstance(error_data["errors"], dict):
            errors = [f"{field}: {msg}" for field, msg in error_data["errors"].items()]
            return " | ".join(errors)
        return str(error_data["errors"])

    if "message" in error_data:
        return str(error_data["message"])

    return response.text[:500]


class BaseClient:
    """Base client that executes one logical request against candidate URL shapes."""

    def __init__(
        self,
        config: JiraConfig,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
        pool_connections: int = 10,
        pool_maxsize: int = 20,
    ) -> None:
        self.config = config
        self.timeout = config.timeout
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.pool_connections = pool_connections
        self.pool_maxsize = pool_maxsize

        # Fails fast with ConfigInvalid before any network call
        self.headers = build_auth_headers(config.deployment_mode, config.secret, config.email)
        self.resolver = EndpointResolver(config)
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with connection pooling and no automatic retries."""
        session = requests.Session()

        adapter = HTTPAdapter(
            max_retries=Retry(total=0, raise_on_status=False),
            pool_connections=self.pool_connections,
            pool_maxsize=self.pool_maxsize,
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    @property
    def learned_base_url(self) -> str | None:
        return self.resolver.learned_base

    def execute(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        cancel: CancelToken | None = None,
    ) -> Any:
        """
        Execute one logical request, trying candidate URLs in order.

        A 404 moves on to the next candidate; any other failure stops the loop.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Canonical API path, e.g. /rest/api/2/myself
            json: Optional JSON body
            params: Optional query parameters
            cancel: Optional cancellation token

        Returns:
            Decoded JSON payload, or None for an empty response

        Raises:
            Cancelled: If cancellation was requested before a candidate was tried
                or while the successful one was in flight
            NetworkFailure: On transport errors
            RequestFailed: On non-2xx outcome
        """
        candidates = self.resolver.candidates(path)
        last_status = 0
        last_url: str | None = None
        last_detail: str | None = None

        for index, candidate in enumerate(candidates):
            check_cancelled(cancel)

            try:
                response = self.session.request(
                    method,
                    candidate.url,
                    headers=self.headers,
                    json=json,
                    params=params,
                    timeout=self.timeout,
                )
            except requests.exceptions.RequestException as e:
                self.logger.error(f"{method} {candidate.url} failed: {e}")
                raise NetworkFailure(candidate.url, str(e)) from e

            self.logger.debug(f"{method} {candidate.url} -> {response.status_code}")
            last_status = response.status_code
            last_url = candidate.url

            if 200 <= response.status_code < 300:
                check_cancelled(cancel)
                if index == 0:
                    # Configured base answers again; the correction is stale
                    self.resolver.forget()
                elif (
                    candidate.base != self.config.base_url
                    and self.config.deployment_mode == DeploymentMode.SERVER
                ):
                    self.resolver.remember(candidate.base)
                return self._decode(response, candidate.url)

            last_detail = parse_error_response(response)
            if response.status_code != 404:
                break

        error = RequestFailed(last_status, url=last_url, detail=last_detail)
        self.logger.error(f"{method} {path} failed: {error}")
        raise error

    def _decode(self, response: requests.Response, url: str) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RequestFailed(
                response.status_code,
                url=url,
                hint="unexpected non-JSON response, check base URL",
            ) from e

    def get(self, path: str, **kwargs: Any) -> Any:
        """Make GET request."""
        return self.execute("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        """Make POST request."""
        return self.execute("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        """Make PUT request."""
        return self.execute("PUT", path, **kwargs)

    def close(self) -> None:
        """Close the session."""
        if self.session:
            self.session.close()
            self.logger.debug("Session closed")

    def __enter__(self) -> "BaseClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
