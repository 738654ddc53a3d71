"""Auxiliary index — a single JSON document listing every saved context.

The index is a convenience cache over the partition tree, never the source of
truth: an unreadable index is treated as empty, and callers do not fail when
it cannot be updated. Read-modify-write cycles hold an exclusive ``flock`` on
a sidecar lock file so concurrent savers do not drop each other's entries.
"""

from __future__ import annotations

import contextlib
import fcntl
import json
import logging
from typing import Any, Iterable, Iterator

from ctx_memory.models import BaseContext, record_scope_key
from ctx_memory.paths import StoragePaths, ensure_dir
from ctx_memory.store import dump_json

logger = logging.getLogger(__name__)


class IndexManager:
    """Maintains ``context-index.json`` alongside the record store."""

    def __init__(self, paths: StoragePaths) -> None:
        self.paths = paths

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        ensure_dir(self.paths.root)
        with self.paths.index_lock_file.open("a") as lock:
            fcntl.flock(lock, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock, fcntl.LOCK_UN)

    def load(self) -> list[dict[str, Any]]:
        """Return index entries; a missing or corrupt index reads as empty."""
        path = self.paths.index_file
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable index {path}: {e}")
            return []

        entries = data.get("contexts") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning(f"Ignoring malformed index {path}: missing 'contexts' list")
            return []
        return [e for e in entries if isinstance(e, dict)]

    def _save(self, entries: list[dict[str, Any]]) -> None:
        dump_json({"contexts": entries}, self.paths.index_file)

    def upsert(self, context: BaseContext) -> None:
        """Replace the entry with the same (id, scope), or append a new one."""
        record = context.to_record()
        key = context.scope_key
        with self._locked():
            entries = self.load()
            for i, entry in enumerate(entries):
                if record_scope_key(entry) == key:
                    entries[i] = record
                    break
            else:
                entries.append(record)
            self._save(entries)
        logger.debug(f"Index updated for {key}")

    def rebuild(self, records: Iterable[BaseContext]) -> int:
        """Replace the whole index with ``records``. Returns the entry count."""
        entries = [r.to_record() for r in records]
        with self._locked():
            self._save(entries)
        logger.info(f"Rebuilt index with {len(entries)} entries")
        return len(entries)
