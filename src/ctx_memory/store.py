"""Record store — one JSON file per context, partitioned by scope."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ctx_memory.errors import StorageError
from ctx_memory.models import ConversationContext, ProjectContext, parse_context
from ctx_memory.paths import RECORD_SUFFIX, StoragePaths, ensure_dir, validate_component

logger = logging.getLogger(__name__)

AnyContext = Union[ProjectContext, ConversationContext]


def dump_json(data, path: Path) -> None:
    """Pretty-print ``data`` to ``path`` via a temp file and atomic rename."""
    tmp = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def load_record(path: Path) -> AnyContext:
    """Read and validate a single record file, raising StorageError on failure."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return parse_context(raw)
    except FileNotFoundError:
        raise
    except (OSError, ValueError, ValidationError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
        raise StorageError(f"Failed to read context file {path}: {e}", path=path) from e


class RecordStore:
    """Reads and writes individual context records."""

    def __init__(self, paths: StoragePaths) -> None:
        self.paths = paths

    def resolve_path(self, context_id: str, project_id: Optional[str] = None, create: bool = True) -> Path:
        """Return the file path for (id, project).

        Project records live in ``projects/<projectId>/``; that directory is
        created when ``create`` is set. Conversation records live in the flat
        conversation directory.
        """
        name = validate_component(context_id, "id") + RECORD_SUFFIX
        if project_id:
            project_dir = self.paths.project_dir(project_id)
            if create:
                ensure_dir(project_dir)
            return project_dir / name
        return self.paths.conversations_dir / name

    def write(self, context: AnyContext) -> Path:
        """Persist ``context``, replacing any previous version in its scope."""
        path = None
        try:
            path = self.resolve_path(context.id, context.project_scope)
            ensure_dir(path.parent)
            dump_json(context.to_record(), path)
        except OSError as e:
            target = path or context.id
            raise StorageError(f"Failed to write context {target}: {e}", path=path) from e
        logger.debug(f"Wrote context {context.id} to {path}")
        return path

    def read(self, context_id: str, project_id: Optional[str] = None) -> Optional[AnyContext]:
        """Return the stored context, or None if no file exists for it."""
        path = self.resolve_path(context_id, project_id, create=False)
        try:
            return load_record(path)
        except FileNotFoundError:
            return None

    def exists(self, context_id: str, project_id: Optional[str] = None) -> bool:
        return self.resolve_path(context_id, project_id, create=False).is_file()
