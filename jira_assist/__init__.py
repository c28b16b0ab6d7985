#!/usr/bin/env python3
"""
Jira Assist

Adaptive Jira client for chat assistants: works against Jira Cloud and
Server/Data Center, heals base URL shapes, resolves status phrases into
transitions, and explains authentication failures.

Version: 1.0
"""

__version__ = "1.0.0"
__license__ = "MIT"

from jira_assist.base_client import BaseClient
from jira_assist.cancellation import CancelToken
from jira_assist.config import DeploymentMode, JiraConfig, load_env_file, validate_config
from jira_assist.diagnostics import AuthDiagnosticsProbe, Diagnosis, ProbeResult, Verdict
from jira_assist.errors import (
    Cancelled,
    ConfigInvalid,
    JiraAssistError,
    NetworkFailure,
    NoMatchingTransition,
    RequestFailed,
)
from jira_assist.jira_client import JiraClient
from jira_assist.logging_config import setup_logging
from jira_assist.models import Issue, Sprint, StatusCategory, Transition, User
from jira_assist.transitions import START_WORK_TARGETS, TransitionResolver, find_transition

__all__ = [
    # Clients
    "BaseClient",
    "JiraClient",
    "AuthDiagnosticsProbe",
    "TransitionResolver",
    # Configuration
    "JiraConfig",
    "DeploymentMode",
    "load_env_file",
    "validate_config",
    "setup_logging",
    # Records
    "Issue",
    "Sprint",
    "StatusCategory",
    "Transition",
    "User",
    "Diagnosis",
    "ProbeResult",
    "Verdict",
    # Errors
    "JiraAssistError",
    "ConfigInvalid",
    "NetworkFailure",
    "RequestFailed",
    "NoMatchingTransition",
    "Cancelled",
    # Utilities
    "CancelToken",
    "find_transition",
    "START_WORK_TARGETS",
]
