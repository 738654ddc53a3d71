"""Tests for environment-driven settings."""

from pathlib import Path

from ctx_memory.config import get_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("CTX_MEMORY_STORAGE_ROOT", raising=False)
    settings = get_settings()
    assert settings.resolved_root == Path.home() / ".claude"
    assert settings.index_filename == "context-index.json"
    assert settings.index_enabled is True


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CTX_MEMORY_STORAGE_ROOT", str(tmp_path))
    monkeypatch.setenv("ctx_memory_index_enabled", "false")
    settings = get_settings()
    assert settings.resolved_root == tmp_path
    assert settings.index_enabled is False


def test_explicit_override_beats_env(monkeypatch, tmp_path):
    monkeypatch.setenv("CTX_MEMORY_STORAGE_ROOT", "/somewhere/else")
    settings = get_settings(storage_root=tmp_path)
    assert settings.resolved_root == tmp_path
