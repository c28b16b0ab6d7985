#!/usr/bin/env python3
"""
Cooperative cancellation for chat-driven operations.
"""
import threading

from jira_assist.errors import Cancelled


class CancelToken:
    """Cancellation signal shared between a caller and an in-flight operation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise Cancelled if cancellation was requested."""
        if self._event.is_set():
            raise Cancelled()


def check_cancelled(cancel: CancelToken | None) -> None:
    """Raise Cancelled when a token is given and has been cancelled."""
    if cancel is not None:
        cancel.raise_if_cancelled()
