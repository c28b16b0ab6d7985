#!/usr/bin/env python3
"""Domain records for Jira issues, transitions, users and sprints."""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class StatusCategory(str, Enum):
    NEW = "new"
    INDETERMINATE = "indeterminate"
    DONE = "done"
    OTHER = "other"

    @classmethod
    def from_key(cls, key: Any) -> "StatusCategory":
        # Jira reports "undefined" (and occasionally nothing) for unmapped statuses
        for member in cls:
            if member.value == key:
                return member
        return cls.OTHER


@dataclass(frozen=True)
class Subtask:
    key: str
    summary: str
    status: str


@dataclass(frozen=True)
class Comment:
    author: str
    body: str
    created: str


@dataclass(frozen=True)
class Issue:
    key: str
    id: str
    summary: str
    description: str
    status: str
    status_category: StatusCategory
    priority: str
    priority_id: int
    assignee: str | None
    reporter: str
    issue_type: str
    labels: frozenset[str]
    created: str
    updated: str
    url: str
    sprint: str | None = None
    story_points: float | None = None
    subtasks: tuple[Subtask, ...] = field(default_factory=tuple)
    comments: tuple[Comment, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status_category"] = self.status_category.value
        data["labels"] = sorted(self.labels, key=str.lower)
        data["subtasks"] = [asdict(s) for s in self.subtasks]
        data["comments"] = [asdict(c) for c in self.comments]
        return data


@dataclass(frozen=True)
class Transition:
    id: str
    name: str
    to_name: str
    to_id: str

    def describe(self) -> str:
        return f'"{self.name}" → {self.to_name}'

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "to": {"name": self.to_name, "id": self.to_id}}


@dataclass(frozen=True)
class User:
    display_name: str
    account_id: str | None = None
    name: str | None = None
    email_address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Sprint:
    id: int
    name: str
    state: str
    start_date: str | None = None
    end_date: str | None = None
    goal: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
