"""Tests for storage paths and the record store."""

import json
import os

import pytest

from ctx_memory.errors import MalformedArgumentsError, StorageError
from ctx_memory.models import ConversationContext, ProjectContext
from ctx_memory.paths import StoragePaths, validate_component
from ctx_memory.store import RecordStore


@pytest.fixture
def paths(tmp_path):
    return StoragePaths(root=tmp_path / "store")


@pytest.fixture
def store(paths):
    return RecordStore(paths)


def test_storage_paths_layout(paths):
    root = paths.root
    assert paths.conversations_dir == root / "contexts"
    assert paths.projects_dir == root / "projects"
    assert paths.index_file == root / "context-index.json"
    assert paths.project_dir("p") == root / "projects" / "p"


def test_storage_paths_from_settings(settings):
    paths = StoragePaths.from_settings(settings)
    assert paths.root == settings.resolved_root
    assert paths.conversations_dir.name == "contexts"


def test_directories_are_created_lazily(paths, store):
    assert not paths.root.exists()
    store.write(ConversationContext(id="a", session_id="s", content="x"))
    assert paths.conversations_dir.is_dir()
    assert not paths.projects_dir.exists()


def test_resolve_path_creates_project_dir(paths, store):
    path = store.resolve_path("c1", "proj1")
    assert path == paths.projects_dir / "proj1" / "c1.json"
    assert path.parent.is_dir()
    # idempotent
    assert store.resolve_path("c1", "proj1") == path


def test_resolve_path_without_create(paths, store):
    path = store.resolve_path("c1", "proj1", create=False)
    assert not path.parent.exists()


def test_resolve_path_conversation(paths, store):
    assert store.resolve_path("c1") == paths.conversations_dir / "c1.json"


@pytest.mark.parametrize("value", ["", "  ", ".", "..", "a/b", "..\\x", "a\x00b"])
def test_validate_component_rejects_unsafe_names(value):
    with pytest.raises(MalformedArgumentsError):
        validate_component(value, "id")


def test_write_is_pretty_printed_and_omits_absent_fields(store):
    ctx = ProjectContext(id="c1", project_id="p", content="hello", timestamp="2024-01-01T00:00:00.000Z")
    path = store.write(ctx)
    text = path.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    data = json.loads(text)
    assert data == {
        "id": "c1",
        "content": "hello",
        "timestamp": "2024-01-01T00:00:00.000Z",
        "kind": "project",
        "projectId": "p",
    }


def test_write_replaces_existing_file(store):
    store.write(ConversationContext(id="a", session_id="s", content="one"))
    store.write(ConversationContext(id="a", session_id="s", content="two"))
    assert store.read("a").content == "two"
    assert [p.name for p in store.paths.conversations_dir.iterdir()] == ["a.json"]


def test_read_missing_returns_none_without_side_effects(paths, store):
    assert store.read("missing") is None
    assert store.read("missing", "proj") is None
    assert not paths.root.exists()


def test_read_corrupt_file_raises_storage_error(paths, store):
    paths.conversations_dir.mkdir(parents=True)
    (paths.conversations_dir / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        store.read("bad")


def test_read_invalid_record_raises_storage_error(paths, store):
    paths.conversations_dir.mkdir(parents=True)
    (paths.conversations_dir / "bad.json").write_text('{"id": "bad"}', encoding="utf-8")
    with pytest.raises(StorageError):
        store.read("bad")


def test_read_legacy_record_without_kind(paths, store):
    project_dir = paths.projects_dir / "p"
    project_dir.mkdir(parents=True)
    (project_dir / "c.json").write_text(
        json.dumps({"id": "c", "projectId": "p", "content": "legacy", "timestamp": "2023-05-01T00:00:00.000Z"}),
        encoding="utf-8",
    )
    ctx = store.read("c", "p")
    assert isinstance(ctx, ProjectContext)
    assert ctx.content == "legacy"


def test_project_dir_failure_raises_storage_error(paths, store):
    paths.root.mkdir(parents=True)
    paths.projects_dir.write_text("not a directory", encoding="utf-8")
    with pytest.raises(StorageError):
        store.write(ProjectContext(id="c1", project_id="p", content="x"))


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores permissions")
def test_read_only_projects_dir_raises_storage_error(paths, store):
    paths.projects_dir.mkdir(parents=True)
    paths.projects_dir.chmod(0o500)
    try:
        with pytest.raises(StorageError):
            store.write(ProjectContext(id="c1", project_id="p", content="x"))
    finally:
        paths.projects_dir.chmod(0o700)
