#!/usr/bin/env python3
"""
Authorization headers for Jira Cloud (Basic) and Server/Data Center (Bearer PAT).
"""
import base64

from jira_assist.config import DeploymentMode
from jira_assist.errors import ConfigInvalid

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def basic_auth_value(email: str, secret: str) -> str:
    encoded = base64.b64encode(f"{email}:{secret}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


def bearer_auth_value(secret: str) -> str:
    return f"Bearer {secret}"


def build_auth_headers(
    mode: DeploymentMode, secret: str, email: str | None = None
) -> dict[str, str]:
    """
    Build request headers for the given deployment mode.

    Args:
        mode: Deployment mode (cloud uses Basic email:token, server uses Bearer PAT)
        secret: API token (cloud) or personal access token (server)
        email: Account email, required for cloud

    Returns:
        Header dict with Authorization, Accept and Content-Type

    Raises:
        ConfigInvalid: If the secret is empty or cloud mode has no email
    """
    if not secret:
        raise ConfigInvalid("Missing required setting: JIRA_API_TOKEN (API token or PAT)")

    headers = dict(JSON_HEADERS)
    if mode == DeploymentMode.CLOUD:
        if not email:
            raise ConfigInvalid(
                "Missing required setting: JIRA_EMAIL (needed for Jira Cloud basic auth)"
            )
        headers["Authorization"] = basic_auth_value(email, secret)
    else:
        headers["Authorization"] = bearer_auth_value(secret)
    return headers
