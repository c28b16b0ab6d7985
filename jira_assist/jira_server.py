#!/usr/bin/env python3
"""
Jira Assist MCP Server
Exposes issue lookup, assignment, status moves and auth diagnostics to a chat assistant.
"""

import json
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP

from jira_assist.config import JiraConfig, load_env_file, validate_config
from jira_assist.error_handler import handle_errors
from jira_assist.errors import ConfigInvalid
from jira_assist.jira_client import JiraClient
from jira_assist.logging_config import log_server_shutdown, log_server_startup, setup_logging
from jira_assist.mappers import extract_issue_key

# Initialize
project_root = Path(__file__).parent.parent
log_file = project_root / "logs" / "jira_server.log"
logger = setup_logging(log_file=log_file)

load_env_file()
mcp = FastMCP("Jira Assist")

jira_client: Optional[JiraClient] = None
config_error: Optional[ConfigInvalid] = None


def get_client() -> Optional[JiraClient]:
    return jira_client


def require_client() -> JiraClient:
    """Return the client or raise the configuration error that prevented it."""
    if jira_client is None:
        raise config_error or ConfigInvalid("Jira client not initialized")
    return jira_client


def resolve_key(issue: str) -> str:
    client = require_client()
    key = extract_issue_key(issue, client.config.project_key)
    if not key:
        raise ValueError(f"Could not find a Jira issue key in {issue!r} (expected e.g. PROJ-123)")
    return key


# Initialize client
try:
    config = JiraConfig()
    validate_config(config, logger)

    log_server_startup(logger, "Jira Assist Server", config.to_dict())

    jira_client = JiraClient(config)

except ConfigInvalid as e:
    logger.critical(f"Configuration error: {e}")
    config_error = e
except Exception as e:
    logger.critical(f"Failed to initialize Jira client: {e}", exc_info=True)
    config_error = ConfigInvalid(f"Failed to initialize Jira client: {e}")


# MCP Tools
@mcp.tool()
@handle_errors(logger, get_client)
def jira_whoami() -> str:
    """
    Show the authenticated Jira user. Runs auth diagnostics on 401.

    Returns:
        JSON string with displayName, accountId/name and email
    """
    return json.dumps(require_client().get_current_user().to_dict(), indent=2)


@mcp.tool()
@handle_errors(logger, get_client)
def jira_get_issue(issue: str) -> str:
    """
    Get one issue with subtasks and the most recent comments.

    Args:
        issue: Issue key (e.g., "PROJ-123"), or just the number when a project key is configured

    Returns:
        JSON string with the issue
    """
    return json.dumps(require_client().get_issue(resolve_key(issue)).to_dict(), indent=2)


@mcp.tool()
@handle_errors(logger, get_client)
def jira_my_issues() -> str:
    """
    List unfinished issues assigned to me, highest priority first.

    Returns:
        JSON string with up to 30 issues
    """
    issues = require_client().get_my_issues()
    return json.dumps([i.to_dict() for i in issues], indent=2)


@mcp.tool()
@handle_errors(logger, get_client)
def jira_next_issue() -> str:
    """
    Show the next highest-priority unassigned issue without taking it.

    Returns:
        JSON string with the issue, or a message when the backlog is empty
    """
    issue = require_client().get_next_priority_issue()
    if issue is None:
        return json.dumps({"message": "No unassigned issues found in the backlog"})
    return json.dumps(issue.to_dict(), indent=2)


@mcp.tool()
@handle_errors(logger, get_client)
def jira_take_next_issue() -> str:
    """
    Take the next priority issue: assign it to me and move it to an in-progress status.

    Returns:
        JSON string with the updated issue
    """
    issue = require_client().take_next_issue()
    if issue is None:
        return json.dumps({"message": "No unassigned issues found in the backlog"})
    return json.dumps(issue.to_dict(), indent=2)


@mcp.tool()
@handle_errors(logger, get_client)
def jira_sprint_issues() -> str:
    """
    List issues of the active sprint (Scrum), the board (Kanban), or open project issues.

    Returns:
        JSON string with up to 50 issues
    """
    issues = require_client().get_sprint_issues()
    return json.dumps([i.to_dict() for i in issues], indent=2)


@mcp.tool()
@handle_errors(logger, get_client)
def jira_get_transitions(issue: str) -> str:
    """
    List the status transitions currently available for an issue.

    Args:
        issue: Issue key (e.g., "PROJ-123")

    Returns:
        JSON string with transitions (name and destination status)
    """
    transitions = require_client().get_transitions(resolve_key(issue))
    return json.dumps([t.to_dict() for t in transitions], indent=2)


@mcp.tool()
@handle_errors(logger, get_client)
def jira_move_issue(issue: str, status: str) -> str:
    """
    Move an issue to a new status.

    Args:
        issue: Issue key (e.g., "PROJ-123")
        status: Target status or transition name; several alternatives may be
            given separated by "|" and are tried in order (e.g., "done|closed|resolved")

    Returns:
        JSON string with the new status, or the available transitions if none matched
    """
    key = resolve_key(issue)
    targets = [t.strip() for t in status.split("|") if t.strip()]
    new_status = require_client().move_to_status(key, *targets)
    return json.dumps({"issue_key": key, "status": new_status})


@mcp.tool()
@handle_errors(logger, get_client)
def jira_start_work(issue: str) -> str:
    """
    Assign an issue to me and move it to an in-progress status.

    Args:
        issue: Issue key (e.g., "PROJ-123")

    Returns:
        JSON string with the new status
    """
    key = resolve_key(issue)
    new_status = require_client().start_work(key)
    return json.dumps({"issue_key": key, "status": new_status})


@mcp.tool()
@handle_errors(logger, get_client)
def jira_assign_to_me(issue: str) -> str:
    """
    Assign an issue to the authenticated user.

    Args:
        issue: Issue key (e.g., "PROJ-123")

    Returns:
        JSON string with the assignee
    """
    key = resolve_key(issue)
    user = require_client().assign_to_me(key)
    return json.dumps({"issue_key": key, "assignee": user.display_name})


@mcp.tool()
@handle_errors(logger, get_client)
def jira_add_comment(issue: str, comment: str) -> str:
    """
    Add a comment to an issue.

    Args:
        issue: Issue key (e.g., "PROJ-123")
        comment: Comment text

    Returns:
        JSON string with success status
    """
    if not comment.strip():
        raise ValueError("comment cannot be empty")
    key = resolve_key(issue)
    require_client().add_comment(key, comment)
    return json.dumps({"success": True, "issue_key": key})


@mcp.tool()
@handle_errors(logger, get_client)
def jira_diagnose_auth() -> str:
    """
    Probe which auth mode and base URL shape this Jira accepts, and suggest config changes.

    Returns:
        JSON string with the verdict, suggested settings, hints and raw probe results
    """
    return json.dumps(require_client().diagnose().to_dict(), indent=2)


def main() -> None:
    """Main entry point for Jira Assist MCP Server."""
    try:
        if not jira_client:
            logger.error("Server starting with errors - some features unavailable")

        logger.info("Starting Jira Assist MCP Server...")
        mcp.run()

    except KeyboardInterrupt:
        log_server_shutdown(logger, "Jira Assist Server")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        if jira_client:
            jira_client.close()


if __name__ == "__main__":
    main()
