#!/usr/bin/env python3
"""
Configuration management for the Jira client.
Handles environment variables, validation, and defaults.
"""
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from jira_assist.errors import ConfigInvalid

SERVER_SUBPATH = "/jira"
CLOUD_HOST_MARKER = ".atlassian.net"


def load_env_file(env_path: Path | None = None) -> None:
    """Load environment variables from .env file."""
    if env_path is None:
        project_root = Path(__file__).parent.parent
        env_path = project_root / ".env"

    if env_path.exists():
        load_dotenv(env_path)


def is_valid_url(url: str) -> bool:
    """Validate URL format."""
    url_pattern = re.compile(
        r"^https?://"  # http:// or https://
        r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|"  # domain
        r"localhost|"  # localhost
        r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"  # or IP
        r"(?::\d+)?"  # optional port
        r"(?:/?|[/?]\S+)$",
        re.IGNORECASE,
    )
    return url_pattern.match(url) is not None


class DeploymentMode(str, Enum):
    """Which Jira API variant and auth scheme is in effect."""

    CLOUD = "cloud"
    SERVER = "server"

    @classmethod
    def parse(cls, value: str | None) -> "DeploymentMode | None":
        if not value:
            return None
        normalized = value.strip().lower()
        if normalized in ("cloud", "true"):
            return cls.CLOUD
        if normalized in ("server", "dc", "datacenter", "data-center", "server/dc", "false"):
            return cls.SERVER
        raise ConfigInvalid(
            f"Invalid JIRA_DEPLOYMENT: {value!r} (expected 'cloud' or 'server')"
        )


def detect_deployment_mode(base_url: str) -> DeploymentMode:
    """Guess the deployment from the host: *.atlassian.net is Cloud, anything else Server/DC."""
    if CLOUD_HOST_MARKER in base_url.lower():
        return DeploymentMode.CLOUD
    return DeploymentMode.SERVER


def _env_mode() -> DeploymentMode | None:
    return DeploymentMode.parse(os.getenv("JIRA_DEPLOYMENT"))


@dataclass(frozen=True)
class JiraConfig:
    """Immutable Jira connection settings for one client instance."""

    base_url: str = field(default_factory=lambda: os.getenv("JIRA_BASE_URL", ""))
    secret: str = field(
        default_factory=lambda: os.getenv("JIRA_API_TOKEN") or os.getenv("JIRA_PAT", "")
    )
    deployment_mode: DeploymentMode | None = field(default_factory=_env_mode)
    email: str = field(default_factory=lambda: os.getenv("JIRA_EMAIL", ""))
    project_key: str = field(default_factory=lambda: os.getenv("JIRA_PROJECT_KEY", ""))
    board_id: str = field(default_factory=lambda: os.getenv("JIRA_BOARD_ID", ""))
    # Custom field ids are assigned per deployment (customfield_10016 on many Cloud sites)
    story_points_field: str = field(
        default_factory=lambda: os.getenv("JIRA_STORY_POINTS_FIELD", "")
    )
    timeout: int = field(default_factory=lambda: int(os.getenv("JIRA_TIMEOUT", "30")))

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", (self.base_url or "").strip().rstrip("/"))
        if isinstance(self.deployment_mode, str) and not isinstance(
            self.deployment_mode, DeploymentMode
        ):
            object.__setattr__(self, "deployment_mode", DeploymentMode.parse(self.deployment_mode))
        if self.deployment_mode is None:
            object.__setattr__(self, "deployment_mode", detect_deployment_mode(self.base_url))

    @classmethod
    def from_env(cls, env_path: Path | None = None) -> "JiraConfig":
        """Load .env (if present) and build a config from the environment."""
        load_env_file(env_path)
        return cls()

    @property
    def is_cloud(self) -> bool:
        return self.deployment_mode == DeploymentMode.CLOUD

    def validate(self) -> tuple[bool, list[str]]:
        """Validate configuration. Returns (is_valid, errors)."""
        errors: list[str] = []

        if not self.base_url:
            errors.append("Missing required setting: JIRA_BASE_URL")
        elif not self.base_url.startswith("https://"):
            errors.append("JIRA_BASE_URL must use HTTPS (start with https://)")
        elif not is_valid_url(self.base_url):
            errors.append(f"Invalid JIRA_BASE_URL: {self.base_url}")

        if not self.secret:
            errors.append("Missing required setting: JIRA_API_TOKEN (API token or PAT)")

        if self.is_cloud and not self.email:
            errors.append(
                "Missing required setting: JIRA_EMAIL (needed for Jira Cloud). "
                "Using Jira Server/Data Center? Set JIRA_DEPLOYMENT=server"
            )
        if self.email and "@" not in self.email:
            errors.append(f"Invalid JIRA_EMAIL format: {self.email}")

        return len(errors) == 0, errors

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary with the secret masked."""
        return {
            "base_url": self.base_url,
            "deployment_mode": self.deployment_mode.value if self.deployment_mode else None,
            "email": self.email,
            "project_key": self.project_key,
            "board_id": self.board_id,
            "story_points_field": self.story_points_field,
            "timeout": self.timeout,
            "api_token": "*" * 8 if self.secret else "",
        }


def validate_config(config: JiraConfig, logger: Any = None) -> None:
    """
    Validate configuration and raise exception if invalid.

    Args:
        config: Configuration object to validate
        logger: Optional logger for error messages

    Raises:
        ConfigInvalid: If configuration is invalid
    """
    is_valid, errors = config.validate()

    if not is_valid:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {err}" for err in errors)
        if logger:
            logger.error(error_msg)
        raise ConfigInvalid(error_msg, problems=errors)
