#!/usr/bin/env python3
"""
Resolve human status phrases into live workflow transitions.

Workflows differ per project, so a single intent ("start work") is expressed
as an ordered list of synonyms tried against the issue's current transitions.
"""
import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from jira_assist.cancellation import CancelToken, check_cancelled
from jira_assist.errors import NoMatchingTransition
from jira_assist.models import Transition

logger = logging.getLogger(__name__)

START_WORK_TARGETS: tuple[str, ...] = (
    "in progress",
    "progress",
    "start",
    "active",
    "doing",
    "development",
    "open",
    "analysis",
)


class TransitionSource(Protocol):
    def get_transitions(
        self, issue_key: str, cancel: CancelToken | None = None
    ) -> list[Transition]: ...

    def transition_issue(
        self, issue_key: str, transition_id: str, cancel: CancelToken | None = None
    ) -> None: ...


def find_transition(transitions: Sequence[Transition], targets: Iterable[str]) -> Transition | None:
    """
    Find the transition matching the first phrase that matches anything.

    Matching is a case-insensitive substring test against the transition name
    or its destination status. Within one phrase the first transition in
    server order wins.

    Args:
        transitions: Transitions as returned by the server
        targets: Phrases in priority order

    Returns:
        Matching transition, or None
    """
    for target in targets:
        phrase = (target or "").strip().lower()
        if not phrase:
            continue
        for transition in transitions:
            if phrase in transition.name.lower() or phrase in transition.to_name.lower():
                return transition
    return None


class TransitionResolver:
    """Moves issues to a target status via the matching transition."""

    def __init__(self, client: TransitionSource) -> None:
        self.client = client

    def move_to_status(
        self,
        issue_key: str,
        targets: Sequence[str],
        cancel: CancelToken | None = None,
    ) -> str:
        """
        Move an issue to the first status matching the given phrases.

        Args:
            issue_key: Issue key
            targets: Status phrases in priority order
            cancel: Optional cancellation token

        Returns:
            Display name of the destination status

        Raises:
            NoMatchingTransition: If no phrase matches any available transition
        """
        # Always fresh: the workflow state changes after every transition
        transitions = self.client.get_transitions(issue_key, cancel=cancel)
        match = find_transition(transitions, targets)

        if match is None:
            raise NoMatchingTransition(
                issue_key,
                list(targets),
                [(t.name, t.to_name) for t in transitions],
            )

        check_cancelled(cancel)
        logger.debug(f"Moving {issue_key} via {match.describe()}")
        self.client.transition_issue(issue_key, match.id, cancel=cancel)
        logger.info(f"Moved {issue_key} to {match.to_name}")
        return match.to_name
