#!/usr/bin/env python3
"""
Candidate URL resolution for Jira deployments whose path shape is not known up front.

Server/Data Center installs are often served under a context path (``/jira``)
and some only answer on the ``latest`` API alias. Cloud has a single fixed shape.
"""
import logging
from dataclasses import dataclass

from jira_assist.config import SERVER_SUBPATH, JiraConfig

logger = logging.getLogger(__name__)

DEFAULT_API_SEGMENT = "/rest/api/2/"
LATEST_API_SEGMENT = "/rest/api/latest/"


@dataclass(frozen=True)
class Candidate:
    """One absolute URL to try, and the base URL it was built from."""

    url: str
    base: str


class EndpointResolver:
    """Builds ordered, de-duplicated candidate URLs for a canonical path."""

    def __init__(self, config: JiraConfig) -> None:
        self.config = config
        # Learned base URL correction, owned by this instance only
        self.learned_base: str | None = None

    @property
    def active_base(self) -> str:
        return self.learned_base or self.config.base_url

    def remember(self, base: str) -> None:
        if base != self.learned_base:
            logger.info(f"Learned Jira base URL correction: {base}")
        self.learned_base = base

    def forget(self) -> None:
        if self.learned_base:
            logger.info(f"Dropping Jira base URL correction: {self.learned_base}")
        self.learned_base = None

    def candidates(self, path: str) -> list[Candidate]:
        """
        Get candidate URLs for a path, canonical first.

        Args:
            path: Canonical resource path, e.g. /rest/api/2/myself

        Returns:
            Ordered list of candidates without duplicate URLs
        """
        base = self.config.base_url
        canonical = Candidate(f"{base}{path}", base)

        if self.config.is_cloud:
            return [canonical]

        ordered = [canonical]
        active = self.active_base

        uses_default_version = DEFAULT_API_SEGMENT in path
        latest_path = path.replace(DEFAULT_API_SEGMENT, LATEST_API_SEGMENT)

        if active != base:
            ordered.append(Candidate(f"{active}{path}", active))
            if uses_default_version:
                ordered.append(Candidate(f"{active}{latest_path}", active))

        if uses_default_version:
            ordered.append(Candidate(f"{base}{latest_path}", base))

        if not active.lower().endswith(SERVER_SUBPATH) and path.startswith("/rest/"):
            healed_base = f"{active}{SERVER_SUBPATH}"
            ordered.append(Candidate(f"{healed_base}{path}", healed_base))
            if uses_default_version:
                ordered.append(Candidate(f"{healed_base}{latest_path}", healed_base))

        seen: set[str] = set()
        unique: list[Candidate] = []
        for candidate in ordered:
            if candidate.url not in seen:
                seen.add(candidate.url)
                unique.append(candidate)
        return unique
