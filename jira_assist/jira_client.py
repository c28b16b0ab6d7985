#!/usr/bin/env python3
"""
Jira REST API client for Jira Cloud (API token + email) and Server/Data Center (PAT).
"""
import logging

import requests

from jira_assist.base_client import BaseClient
from jira_assist.cancellation import CancelToken
from jira_assist.config import JiraConfig, validate_config
from jira_assist.diagnostics import AuthDiagnosticsProbe, Diagnosis
from jira_assist.errors import RequestFailed
from jira_assist.mappers import map_issue, map_sprint, map_transition, map_user
from jira_assist.models import Issue, Sprint, Transition, User
from jira_assist.transitions import START_WORK_TARGETS, TransitionResolver

logger = logging.getLogger(__name__)

SEARCH_FIELDS = [
    "summary",
    "description",
    "status",
    "priority",
    "assignee",
    "reporter",
    "issuetype",
    "labels",
    "created",
    "updated",
    "subtasks",
    "comment",
]
BOARD_ISSUE_FIELDS = [
    "summary",
    "status",
    "priority",
    "assignee",
    "issuetype",
    "labels",
    "created",
    "updated",
    "comment",
    "subtasks",
    "reporter",
]

MY_ISSUES_LIMIT = 30
SPRINT_ISSUES_LIMIT = 50
DEFAULT_SEARCH_LIMIT = 20

# Auth failures propagate even where a missing agile endpoint is tolerated
AUTH_STATUSES = (401, 403)


class JiraClient(BaseClient):
    """Jira API client with URL healing, transitions and auth diagnostics."""

    def __init__(self, config: JiraConfig, session: requests.Session | None = None):
        validate_config(config, logger)
        super().__init__(config, session=session, logger=logger)
        self.transitions = TransitionResolver(self)

        if not config.story_points_field:
            logger.warning(
                "JIRA_STORY_POINTS_FIELD is not set; story points will not be fetched. "
                "The custom field id differs per Jira deployment."
            )

        logger.info(
            f"Jira client initialized ({config.deployment_mode.value} mode, {config.base_url})"
        )

    def _project_clause(self) -> str:
        return f"project = {self.config.project_key}" if self.config.project_key else ""

    def _fields(self, base: list[str]) -> list[str]:
        fields = list(base)
        if self.config.story_points_field:
            fields.append(self.config.story_points_field)
        return fields

    def _map_issues(self, data: dict | None) -> list[Issue]:
        return [
            map_issue(raw, self.config.base_url, self.config.story_points_field)
            for raw in (data or {}).get("issues") or []
        ]

    # ─── Users ───────────────────────────────────────────────────────────────

    def get_current_user(self, cancel: CancelToken | None = None) -> User:
        """Get the authenticated user (myself)."""
        data = self.get("/rest/api/2/myself", cancel=cancel)
        user = map_user(data)
        logger.info(f"Connected as: {user.display_name}")
        return user

    # ─── Issues ──────────────────────────────────────────────────────────────

    def get_issue(self, issue_key: str, cancel: CancelToken | None = None) -> Issue:
        """
        Get a single issue.

        Args:
            issue_key: Issue key (e.g., PROJ-123)
            cancel: Optional cancellation token

        Returns:
            Mapped issue
        """
        logger.debug(f"Fetching issue: {issue_key}")
        data = self.get(
            f"/rest/api/2/issue/{issue_key}",
            params={"expand": "names,transitions"},
            cancel=cancel,
        )
        return map_issue(data, self.config.base_url, self.config.story_points_field)

    def search_issues(
        self,
        jql: str,
        max_results: int = DEFAULT_SEARCH_LIMIT,
        cancel: CancelToken | None = None,
    ) -> list[Issue]:
        """
        Search for issues using JQL with the fixed field projection.

        Args:
            jql: JQL query string
            max_results: Result cap
            cancel: Optional cancellation token

        Returns:
            Mapped issues
        """
        logger.debug(f"Searching with JQL: {jql}")
        payload = {"jql": jql, "maxResults": max_results, "fields": self._fields(SEARCH_FIELDS)}
        data = self.post("/rest/api/2/search", json=payload, cancel=cancel)
        issues = self._map_issues(data)
        logger.info(f"Search returned {len(issues)} issues")
        return issues

    def get_my_issues(self, cancel: CancelToken | None = None) -> list[Issue]:
        """Get unfinished issues assigned to the current user."""
        project = self._project_clause()
        project_filter = f" AND {project}" if project else ""
        jql = (
            f"assignee = currentUser() AND statusCategory != Done{project_filter} "
            "ORDER BY priority ASC, updated DESC"
        )
        return self.search_issues(jql, MY_ISSUES_LIMIT, cancel=cancel)

    def get_next_priority_issue(self, cancel: CancelToken | None = None) -> Issue | None:
        """Get the highest-priority unassigned, unfinished, non-epic issue."""
        project = self._project_clause()
        project_filter = f"{project} AND " if project else ""
        jql = (
            f"{project_filter}assignee is EMPTY AND statusCategory != Done "
            "AND issuetype != Epic ORDER BY priority ASC, rank ASC"
        )
        issues = self.search_issues(jql, 1, cancel=cancel)
        return issues[0] if issues else None

    # ─── Assignment ──────────────────────────────────────────────────────────

    def assign_issue(self, issue_key: str, user_id: str, cancel: CancelToken | None = None) -> None:
        """
        Assign an issue.

        Args:
            issue_key: Issue key
            user_id: accountId (cloud) or username (server)
            cancel: Optional cancellation token
        """
        body = {"accountId": user_id} if self.config.is_cloud else {"name": user_id}
        self.put(f"/rest/api/2/issue/{issue_key}/assignee", json=body, cancel=cancel)
        logger.info(f"Assigned {issue_key} to {user_id}")

    def assign_to_me(self, issue_key: str, cancel: CancelToken | None = None) -> User:
        """Assign an issue to the authenticated user."""
        user = self.get_current_user(cancel=cancel)
        user_id = user.account_id if self.config.is_cloud else user.name
        if not user_id:
            raise ValueError(f"Current user {user.display_name} has no id usable for assignment")
        self.assign_issue(issue_key, user_id, cancel=cancel)
        return user

    # ─── Transitions ─────────────────────────────────────────────────────────

    def get_transitions(self, issue_key: str, cancel: CancelToken | None = None) -> list[Transition]:
        """Get the transitions currently available for an issue."""
        logger.debug(f"Fetching transitions for: {issue_key}")
        data = self.get(f"/rest/api/2/issue/{issue_key}/transitions", cancel=cancel)
        transitions = [map_transition(t) for t in (data or {}).get("transitions") or []]
        logger.info(f"Found {len(transitions)} transitions for {issue_key}")
        return transitions

    def transition_issue(
        self, issue_key: str, transition_id: str, cancel: CancelToken | None = None
    ) -> None:
        """Execute a transition by id."""
        logger.debug(f"Transitioning {issue_key} with transition {transition_id}")
        self.post(
            f"/rest/api/2/issue/{issue_key}/transitions",
            json={"transition": {"id": transition_id}},
            cancel=cancel,
        )

    def move_to_status(self, issue_key: str, *targets: str, cancel: CancelToken | None = None) -> str:
        """
        Move an issue to a status by matching phrases against live transitions.

        Args:
            issue_key: Issue key
            *targets: Status phrases, tried in order
            cancel: Optional cancellation token

        Returns:
            Name of the new status
        """
        return self.transitions.move_to_status(issue_key, list(targets), cancel=cancel)

    def start_work(self, issue_key: str, cancel: CancelToken | None = None) -> str:
        """Assign an issue to the current user and move it to an in-progress status."""
        self.assign_to_me(issue_key, cancel=cancel)
        return self.move_to_status(issue_key, *START_WORK_TARGETS, cancel=cancel)

    def take_next_issue(self, cancel: CancelToken | None = None) -> Issue | None:
        """
        Pick up the next priority issue: assign it, start work, and re-fetch it.

        Returns:
            The updated issue, or None when the backlog has nothing unassigned
        """
        issue = self.get_next_priority_issue(cancel=cancel)
        if issue is None:
            logger.info("No unassigned issues found")
            return None

        self.start_work(issue.key, cancel=cancel)
        return self.get_issue(issue.key, cancel=cancel)

    # ─── Comments ────────────────────────────────────────────────────────────

    def add_comment(self, issue_key: str, body: str, cancel: CancelToken | None = None) -> None:
        """Add a plain-text comment to an issue."""
        logger.debug(f"Adding comment to: {issue_key}")
        self.post(f"/rest/api/2/issue/{issue_key}/comment", json={"body": body}, cancel=cancel)
        logger.info(f"Added comment to {issue_key}")

    # ─── Sprint ──────────────────────────────────────────────────────────────

    def get_active_sprint(self, cancel: CancelToken | None = None) -> Sprint | None:
        """
        Get the active sprint of the configured board.

        Returns:
            Active sprint, or None without a board or for Kanban boards
        """
        if not self.config.board_id:
            return None
        try:
            data = self.get(
                f"/rest/agile/1.0/board/{self.config.board_id}/sprint",
                params={"state": "active"},
                cancel=cancel,
            )
        except RequestFailed as e:
            if e.status in AUTH_STATUSES:
                raise
            logger.warning(f"Board {self.config.board_id} has no sprint API: {e}")
            return None

        sprints = (data or {}).get("values") or []
        return map_sprint(sprints[0]) if sprints else None

    def get_sprint_issues(self, cancel: CancelToken | None = None) -> list[Issue]:
        """
        Get issues of the active sprint, the Kanban board, or unfinished project issues.
        """
        board_id = self.config.board_id
        if board_id:
            sprint = self.get_active_sprint(cancel=cancel)
            if sprint:
                data = self.get(
                    f"/rest/agile/1.0/sprint/{sprint.id}/issue",
                    params={"maxResults": SPRINT_ISSUES_LIMIT},
                    cancel=cancel,
                )
                return self._map_issues(data)

            try:
                data = self.get(
                    f"/rest/agile/1.0/board/{board_id}/issue",
                    params={
                        "maxResults": SPRINT_ISSUES_LIMIT,
                        "fields": ",".join(self._fields(BOARD_ISSUE_FIELDS)),
                    },
                    cancel=cancel,
                )
                issues = self._map_issues(data)
                if issues:
                    return issues
            except RequestFailed as e:
                if e.status in AUTH_STATUSES:
                    raise
                logger.warning(f"Board issue listing failed, falling back to JQL: {e}")

        project = self._project_clause()
        project_filter = f"{project} AND " if project else ""
        jql = f"{project_filter}statusCategory != Done ORDER BY priority ASC, rank ASC"
        return self.search_issues(jql, SPRINT_ISSUES_LIMIT, cancel=cancel)

    # ─── Diagnostics ─────────────────────────────────────────────────────────

    def diagnose(
        self, real_failure: RequestFailed | None = None, cancel: CancelToken | None = None
    ) -> Diagnosis:
        """Run the auth diagnostics probe matrix with this client's session."""
        probe = AuthDiagnosticsProbe(self.config, session=self.session, timeout=self.timeout)
        return probe.run(real_failure=real_failure, cancel=cancel)
