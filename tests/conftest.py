"""Test configuration ensuring local package import when editable install not active."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fakes import FakeSession  # noqa: E402


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()
