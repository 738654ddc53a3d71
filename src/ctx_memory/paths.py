"""Storage layout — the root directory and the partitions beneath it."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ctx_memory.config import Settings
from ctx_memory.errors import MalformedArgumentsError

RECORD_SUFFIX = ".json"

_FORBIDDEN_CHARS = ("/", "\\", "\x00")


def validate_component(value: str, field: str) -> str:
    """Ensure ``value`` can be used as a single file or directory name."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedArgumentsError(f"'{field}' must be a non-empty string")
    if value in {".", ".."} or any(ch in value for ch in _FORBIDDEN_CHARS):
        raise MalformedArgumentsError(f"'{field}' is not a valid storage name: {value!r}")
    return value


@dataclass(frozen=True)
class StoragePaths:
    """Resolved locations of the conversation tree, project tree and index."""

    root: Path
    contexts_dirname: str = "contexts"
    projects_dirname: str = "projects"
    index_filename: str = "context-index.json"

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoragePaths":
        return cls(
            root=settings.resolved_root,
            contexts_dirname=settings.contexts_dirname,
            projects_dirname=settings.projects_dirname,
            index_filename=settings.index_filename,
        )

    @property
    def conversations_dir(self) -> Path:
        return self.root / self.contexts_dirname

    @property
    def projects_dir(self) -> Path:
        return self.root / self.projects_dirname

    @property
    def index_file(self) -> Path:
        return self.root / self.index_filename

    @property
    def index_lock_file(self) -> Path:
        return self.index_file.with_name(self.index_file.name + ".lock")

    def project_dir(self, project_id: str) -> Path:
        return self.projects_dir / validate_component(project_id, "projectId")

    def project_dirs(self) -> list[Path]:
        """Existing per-project directories, sorted by name."""
        if not self.projects_dir.is_dir():
            return []
        return sorted(p for p in self.projects_dir.iterdir() if p.is_dir())


def ensure_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing. Idempotent."""
    path.mkdir(parents=True, exist_ok=True)
    return path
