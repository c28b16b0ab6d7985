"""
Smoke tests for the package surface and the MCP server module.
"""

import importlib

import pytest

MODULES = [
    "jira_assist",
    "jira_assist.auth",
    "jira_assist.base_client",
    "jira_assist.cancellation",
    "jira_assist.config",
    "jira_assist.diagnostics",
    "jira_assist.endpoints",
    "jira_assist.error_handler",
    "jira_assist.errors",
    "jira_assist.jira_client",
    "jira_assist.logging_config",
    "jira_assist.mappers",
    "jira_assist.models",
    "jira_assist.transitions",
]


@pytest.mark.parametrize("module_name", MODULES)
def test_module_imports(module_name):
    assert importlib.import_module(module_name) is not None


def test_server_starts_without_configuration(monkeypatch):
    """Missing settings leave the server up, reporting the exact problem on every tool call."""
    for name in ("JIRA_BASE_URL", "JIRA_API_TOKEN", "JIRA_PAT", "JIRA_EMAIL", "JIRA_DEPLOYMENT"):
        monkeypatch.setenv(name, "")

    from jira_assist import jira_server

    jira_server = importlib.reload(jira_server)

    assert hasattr(jira_server, "mcp")
    assert hasattr(jira_server, "main")
    assert jira_server.jira_client is None

    payload = jira_server.jira_whoami()
    assert '"type": "config_invalid"' in payload
    assert "JIRA_BASE_URL" in payload


def test_cli_help():
    from click.testing import CliRunner

    from jiractl import cli

    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "diagnose" in result.output
