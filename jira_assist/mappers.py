#!/usr/bin/env python3
"""Mapping raw Jira REST JSON into the fixed domain records."""
import json
import re
from typing import Any

from jira_assist.models import Comment, Issue, Sprint, StatusCategory, Subtask, Transition, User

UNKNOWN = "Unknown"
DEFAULT_PRIORITY_ID = 99
MAX_SUBTASKS = 20
MAX_COMMENTS = 5

ISSUE_KEY_RE = re.compile(r"\b([A-Z][A-Z0-9]+-\d+)\b")
ISSUE_NUMBER_RE = re.compile(r"\b(\d+)\b")


def _obj(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value
    # Atlassian Document Format and other structured bodies
    return json.dumps(value)


def _name(value: Any, default: str = UNKNOWN) -> str:
    name = _obj(value).get("name")
    return name if isinstance(name, str) and name else default


def _priority_id(value: Any) -> int:
    try:
        return int(_obj(value).get("id", DEFAULT_PRIORITY_ID))
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY_ID


def _story_points(fields: dict[str, Any], field_id: str | None) -> float | None:
    if not field_id:
        return None
    value = fields.get(field_id)
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _sprint_name(fields: dict[str, Any]) -> str | None:
    # Agile endpoints return the active sprint as an object under "sprint"
    sprint = fields.get("sprint")
    if isinstance(sprint, dict) and sprint.get("name"):
        return str(sprint["name"])
    return None


def map_subtask(raw: Any) -> Subtask:
    raw = _obj(raw)
    fields = _obj(raw.get("fields"))
    return Subtask(
        key=str(raw.get("key", "")),
        summary=_text(fields.get("summary")),
        status=_name(fields.get("status"), default=""),
    )


def map_comment(raw: Any) -> Comment:
    raw = _obj(raw)
    return Comment(
        author=_obj(raw.get("author")).get("displayName") or UNKNOWN,
        body=_text(raw.get("body")),
        created=_text(raw.get("created")),
    )


def map_issue(
    raw: dict[str, Any], base_url: str, story_points_field: str | None = None
) -> Issue:
    """Map an issue payload; every missing or malformed field gets a fallback."""
    raw = _obj(raw)
    fields = _obj(raw.get("fields"))
    status = _obj(fields.get("status"))
    key = str(raw.get("key", ""))

    comments_raw = _obj(fields.get("comment")).get("comments") or []
    subtasks_raw = fields.get("subtasks") or []
    labels = fields.get("labels") or []

    return Issue(
        key=key,
        id=str(raw.get("id", "")),
        summary=_text(fields.get("summary")),
        description=_text(fields.get("description")),
        status=_name(status),
        status_category=StatusCategory.from_key(_obj(status.get("statusCategory")).get("key")),
        priority=_name(fields.get("priority")),
        priority_id=_priority_id(fields.get("priority")),
        assignee=_obj(fields.get("assignee")).get("displayName") or None,
        reporter=_obj(fields.get("reporter")).get("displayName") or UNKNOWN,
        issue_type=_name(fields.get("issuetype")),
        labels=frozenset(str(label) for label in labels if label),
        created=_text(fields.get("created")),
        updated=_text(fields.get("updated")),
        url=f"{base_url}/browse/{key}",
        sprint=_sprint_name(fields),
        story_points=_story_points(fields, story_points_field),
        subtasks=tuple(map_subtask(st) for st in list(subtasks_raw)[:MAX_SUBTASKS]),
        comments=tuple(map_comment(c) for c in list(comments_raw)[-MAX_COMMENTS:]),
    )


def map_transition(raw: Any) -> Transition:
    raw = _obj(raw)
    to = _obj(raw.get("to"))
    return Transition(
        id=str(raw.get("id", "")),
        name=_text(raw.get("name")),
        to_name=_text(to.get("name")),
        to_id=str(to.get("id", "")),
    )


def map_user(raw: Any) -> User:
    raw = _obj(raw)
    return User(
        display_name=raw.get("displayName") or raw.get("name") or UNKNOWN,
        account_id=raw.get("accountId"),
        name=raw.get("name"),
        email_address=raw.get("emailAddress"),
    )


def map_sprint(raw: Any) -> Sprint:
    raw = _obj(raw)
    try:
        sprint_id = int(raw.get("id", 0))
    except (TypeError, ValueError):
        sprint_id = 0
    return Sprint(
        id=sprint_id,
        name=_text(raw.get("name")),
        state=_text(raw.get("state")),
        start_date=raw.get("startDate"),
        end_date=raw.get("endDate"),
        goal=raw.get("goal") or None,
    )


def extract_issue_key(text: str, project_key: str | None = None) -> str | None:
    """Find "PROJ-123" in free text, or combine a bare number with the project key."""
    match = ISSUE_KEY_RE.search(text or "")
    if match:
        return match.group(1)
    if project_key:
        number = ISSUE_NUMBER_RE.search(text or "")
        if number:
            return f"{project_key}-{number.group(1)}"
    return None
