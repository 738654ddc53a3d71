"""Tests for the auxiliary context index."""

import json

import pytest

from ctx_memory.index import IndexManager
from ctx_memory.models import ConversationContext, ProjectContext
from ctx_memory.paths import StoragePaths


@pytest.fixture
def paths(tmp_path):
    return StoragePaths(root=tmp_path)


@pytest.fixture
def index(paths):
    return IndexManager(paths)


def _read_index(paths):
    return json.loads(paths.index_file.read_text(encoding="utf-8"))


def test_upsert_creates_index(paths, index):
    index.upsert(ConversationContext(id="a", session_id="s", content="x"))
    data = _read_index(paths)
    assert [e["id"] for e in data["contexts"]] == ["a"]
    assert data["contexts"][0]["content"] == "x"


def test_upsert_replaces_same_scope(index):
    index.upsert(ProjectContext(id="a", project_id="p", content="one"))
    index.upsert(ProjectContext(id="a", project_id="p", content="two"))
    entries = index.load()
    assert len(entries) == 1
    assert entries[0]["content"] == "two"


def test_upsert_keeps_scopes_apart(index):
    index.upsert(ConversationContext(id="x", session_id="s", content="conv"))
    index.upsert(ProjectContext(id="x", project_id="p", content="proj"))
    index.upsert(ProjectContext(id="x", project_id="q", content="other"))
    contents = sorted(e["content"] for e in index.load())
    assert contents == ["conv", "other", "proj"]


def test_missing_index_loads_empty(index):
    assert index.load() == []


@pytest.mark.parametrize("payload", ["{broken", "[]", '{"contexts": 3}'])
def test_corrupt_index_is_treated_as_empty(paths, index, payload):
    paths.index_file.write_text(payload, encoding="utf-8")
    assert index.load() == []
    index.upsert(ConversationContext(id="a", session_id="s", content="x"))
    assert [e["id"] for e in _read_index(paths)["contexts"]] == ["a"]


def test_rebuild_replaces_entries(index):
    index.upsert(ConversationContext(id="stale", session_id="s", content="x"))
    count = index.rebuild([ProjectContext(id="a", project_id="p", content="y")])
    assert count == 1
    assert [e["id"] for e in index.load()] == ["a"]


def test_lock_file_lives_beside_index(paths, index):
    index.upsert(ConversationContext(id="a", session_id="s", content="x"))
    assert paths.index_lock_file.exists()
    assert paths.index_lock_file.parent == paths.index_file.parent
