"""Context service — wires paths, record store, index and query engine."""

from __future__ import annotations

import logging
from typing import Optional

from ctx_memory.config import Settings, get_settings
from ctx_memory.index import IndexManager
from ctx_memory.paths import StoragePaths
from ctx_memory.query import QueryEngine
from ctx_memory.store import AnyContext, RecordStore

logger = logging.getLogger(__name__)


class ContextService:
    """Entry point for saving, fetching and listing contexts."""

    _instance: Optional["ContextService"] = None

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self.paths = StoragePaths.from_settings(self._settings)
        self.records = RecordStore(self.paths)
        self.index = IndexManager(self.paths)
        self.query = QueryEngine(self.paths)

    # -- operations -----------------------------------------------------------

    def save(self, context: AnyContext) -> None:
        """Write the record, then upsert the index.

        The record file is authoritative: an index failure is logged and the
        save still succeeds.
        """
        path = self.records.write(context)
        logger.info(f"Saved {context.kind} context {context.id} to {path}")
        if not self._settings.index_enabled:
            return
        try:
            self.index.upsert(context)
        except OSError as e:
            logger.error(f"Error updating index for {context.id}: {e}")

    def get(self, context_id: str, project_id: Optional[str] = None) -> Optional[AnyContext]:
        return self.records.read(context_id, project_id)

    def list(
        self,
        project_id: Optional[str] = None,
        tag: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> list[AnyContext]:
        return self.query.list(project_id=project_id, tag=tag, kind=kind)

    # -- maintenance ----------------------------------------------------------

    def reindex(self) -> int:
        """Rebuild the index from every record in the partition tree."""
        return self.index.rebuild(self.query.list())

    def stats(self) -> dict:
        project_dirs = self.paths.project_dirs()
        project_records = sum(len(list(d.glob("*.json"))) for d in project_dirs)
        conversations_dir = self.paths.conversations_dir
        conversation_records = (
            len(list(conversations_dir.glob("*.json"))) if conversations_dir.is_dir() else 0
        )
        return {
            "root": str(self.paths.root),
            "projects": len(project_dirs),
            "project_contexts": project_records,
            "conversation_contexts": conversation_records,
            "index_entries": len(self.index.load()),
        }

    # -- singleton ------------------------------------------------------------

    @classmethod
    def get_instance(cls, settings: Optional[Settings] = None) -> "ContextService":
        if cls._instance is None:
            cls._instance = cls(settings)
        return cls._instance

    @classmethod
    def set_instance(cls, service: "ContextService") -> None:
        cls._instance = service

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None
