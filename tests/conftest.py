"""Shared fixtures: a context service rooted in a temporary directory."""

from __future__ import annotations

import itertools

import pytest

from ctx_memory.config import get_settings
from ctx_memory.service import ContextService


@pytest.fixture
def settings(tmp_path):
    return get_settings(storage_root=tmp_path / "store")


@pytest.fixture
def service(settings):
    return ContextService(settings)


@pytest.fixture
def clock(monkeypatch):
    """Make saves stamp strictly increasing timestamps, one minute apart."""
    stamps = (f"2024-01-01T00:{minute:02d}:00.000Z" for minute in itertools.count())
    monkeypatch.setattr("ctx_memory.tools.save.now_iso", lambda: next(stamps))
