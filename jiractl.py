#!/usr/bin/env python3
"""
jiractl - Command-line companion for the Jira Assist MCP server

Usage:
    jiractl config            # Show resolved configuration and validation problems
    jiractl whoami            # Show the authenticated user
    jiractl issue PROJ-123    # Show one issue
    jiractl mine              # List my unfinished issues
    jiractl transitions 123   # List available status transitions
    jiractl move 123 done     # Move an issue (alternatives: move 123 done closed)
    jiractl diagnose          # Probe auth modes and URL shapes
    jiractl serve             # Run the MCP server on stdio
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from jira_assist import __version__
from jira_assist.config import JiraConfig, load_env_file
from jira_assist.diagnostics import Diagnosis
from jira_assist.errors import Cancelled, JiraAssistError, RequestFailed
from jira_assist.jira_client import JiraClient
from jira_assist.logging_config import setup_logging
from jira_assist.mappers import extract_issue_key
from jira_assist.models import Issue

PROJECT_ROOT = Path(__file__).resolve().parent


# ANSI color codes
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def print_header(text: str) -> None:
    """Print a formatted header"""
    width = 60
    click.echo()
    click.echo(f"{Colors.BOLD}{'=' * width}{Colors.RESET}")
    click.echo(f"{Colors.BOLD}{text.center(width)}{Colors.RESET}")
    click.echo(f"{Colors.BOLD}{'=' * width}{Colors.RESET}")
    click.echo()


def print_success(text: str) -> None:
    click.echo(f"{Colors.GREEN}✓{Colors.RESET} {text}")


def print_error(text: str) -> None:
    click.echo(f"{Colors.RED}✗{Colors.RESET} {text}", err=True)


def print_warning(text: str) -> None:
    click.echo(f"{Colors.YELLOW}⚠{Colors.RESET} {text}")


def print_info(text: str) -> None:
    click.echo(f"{Colors.CYAN}ℹ{Colors.RESET} {text}")


def print_issue(issue: Issue) -> None:
    assignee = issue.assignee or "Unassigned"
    click.echo(f"{Colors.BOLD}{issue.key}{Colors.RESET} {issue.summary}")
    click.echo(f"  {issue.issue_type} | {issue.status} | {issue.priority} | {assignee}")
    if issue.story_points is not None:
        click.echo(f"  Story points: {issue.story_points:g}")
    click.echo(f"  {issue.url}")


def print_diagnosis(diagnosis: Diagnosis) -> None:
    print_header("Auth Diagnosis")
    for name, probe in diagnosis.probes.items():
        if probe.skipped:
            print_info(f"{name}: skipped ({probe.error_hint})")
        elif probe.ok:
            print_success(f"{name}: HTTP {probe.http_status}")
        else:
            status = probe.http_status if probe.http_status is not None else "-"
            print_error(f"{name}: HTTP {status} {probe.error_hint or ''}".rstrip())
    click.echo()
    click.echo(f"{Colors.BOLD}{diagnosis.message}{Colors.RESET}")
    for key, value in diagnosis.suggested_settings.items():
        print_info(f"Set {key}={value}")
    for hint in diagnosis.hints:
        print_warning(hint)


def load_config() -> JiraConfig:
    load_env_file(PROJECT_ROOT / ".env")
    return JiraConfig()


def run_with_client(action: Callable[[JiraClient], Any]) -> Any:
    """Run an action with a client; explain failures and diagnose 401s."""
    client: JiraClient | None = None
    try:
        client = JiraClient(load_config())
        return action(client)
    except RequestFailed as e:
        print_error(str(e))
        if e.status == 401 and client is not None:
            print_diagnosis(client.diagnose(real_failure=e))
        sys.exit(1)
    except Cancelled:
        sys.exit(130)
    except JiraAssistError as e:
        print_error(str(e))
        sys.exit(1)
    finally:
        if client is not None:
            client.close()


@click.group(invoke_without_command=True)
@click.pass_context
@click.option("--version", is_flag=True, help="Show version")
@click.option("--verbose", "-v", is_flag=True, help="Log requests to stderr")
def cli(ctx, version, verbose):
    """jiractl - Jira Assist command-line toolkit"""
    setup_logging(console_level="DEBUG" if verbose else "ERROR", log_level="DEBUG" if verbose else "INFO")
    if version:
        click.echo(f"jiractl version {__version__}")
        ctx.exit()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
def config():
    """Show resolved configuration"""
    print_header("Jira Configuration")
    cfg = load_config()
    for key, value in cfg.to_dict().items():
        click.echo(f"  {key:20} {value or '-'}")
    click.echo()

    is_valid, errors = cfg.validate()
    if is_valid:
        print_success("Configuration is valid")
    else:
        for err in errors:
            print_error(err)
        sys.exit(1)
    if not cfg.story_points_field:
        print_warning("JIRA_STORY_POINTS_FIELD not set; story points will not be shown")


@cli.command()
def whoami():
    """Show the authenticated user"""
    user = run_with_client(lambda c: c.get_current_user())
    print_success(f"Connected as {user.display_name}")
    for label, value in (("Account ID", user.account_id), ("Name", user.name), ("Email", user.email_address)):
        if value:
            print_info(f"{label}: {value}")


def _key(client: JiraClient, text: str) -> str:
    key = extract_issue_key(text, client.config.project_key)
    if not key:
        raise click.BadParameter(f"No issue key found in {text!r}")
    return key


@cli.command()
@click.argument("issue")
def issue(issue):
    """Show one issue"""
    found = run_with_client(lambda c: c.get_issue(_key(c, issue)))
    print_issue(found)
    if found.description:
        click.echo()
        click.echo(found.description)
    for subtask in found.subtasks:
        click.echo(f"  - {subtask.key} [{subtask.status}] {subtask.summary}")
    for comment in found.comments:
        click.echo(f"  > {comment.author} ({comment.created}): {comment.body}")


@cli.command()
def mine():
    """List my unfinished issues"""
    issues = run_with_client(lambda c: c.get_my_issues())
    if not issues:
        print_info("No open issues assigned to you")
    for found in issues:
        print_issue(found)


@cli.command()
@click.argument("issue")
def transitions(issue):
    """List available transitions for an issue"""
    available = run_with_client(lambda c: c.get_transitions(_key(c, issue)))
    for transition in available:
        click.echo(f"  {transition.describe()}")


@cli.command()
@click.argument("issue")
@click.argument("targets", nargs=-1, required=True)
def move(issue, targets):
    """Move an issue to the first matching status"""
    new_status = run_with_client(lambda c: c.move_to_status(_key(c, issue), *targets))
    print_success(f"Status changed to {new_status}")


@cli.command()
def diagnose():
    """Probe auth modes and URL shapes"""
    print_diagnosis(run_with_client(lambda c: c.diagnose()))


@cli.command()
def serve():
    """Run the MCP server on stdio"""
    from jira_assist import jira_server

    jira_server.main()


def main():
    """Entry point for jiractl"""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n")
        print_warning("Operation cancelled by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
