"""Query engine — list contexts from the partition tree."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ctx_memory.errors import MalformedArgumentsError
from ctx_memory.models import CONTEXT_KINDS, parse_timestamp
from ctx_memory.paths import RECORD_SUFFIX, StoragePaths
from ctx_memory.store import AnyContext, load_record

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _read_partition(directory: Path) -> list[AnyContext]:
    """Read every record file directly inside ``directory``.

    A missing directory is an empty partition. Any unreadable record raises.
    """
    if not directory.is_dir():
        return []
    contexts: list[AnyContext] = []
    for path in sorted(directory.iterdir()):
        if path.suffix != RECORD_SUFFIX or not path.is_file():
            continue
        try:
            contexts.append(load_record(path))
        except FileNotFoundError:
            # removed between listing and reading
            logger.debug(f"Skipping vanished context file {path}")
    return contexts


def sort_by_recency(contexts: list[AnyContext]) -> list[AnyContext]:
    """Most recent first; unparseable timestamps sort last."""
    return sorted(
        contexts,
        key=lambda c: parse_timestamp(c.timestamp) or _OLDEST,
        reverse=True,
    )


class QueryEngine:
    """Lists contexts by project, kind and tag."""

    def __init__(self, paths: StoragePaths) -> None:
        self.paths = paths

    def _partitions(self, project_id: Optional[str], kind: Optional[str]) -> list[Path]:
        if project_id:
            return [self.paths.project_dir(project_id)]
        if kind == "project":
            return self.paths.project_dirs()
        if kind == "conversation":
            return [self.paths.conversations_dir]
        return [*self.paths.project_dirs(), self.paths.conversations_dir]

    def list(
        self,
        project_id: Optional[str] = None,
        tag: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> list[AnyContext]:
        """Return matching contexts, most recent first."""
        if kind is not None and kind not in CONTEXT_KINDS:
            raise MalformedArgumentsError(
                f"'type' must be one of {', '.join(CONTEXT_KINDS)}, got {kind!r}"
            )

        contexts: list[AnyContext] = []
        for directory in self._partitions(project_id, kind):
            contexts.extend(_read_partition(directory))

        if tag:
            contexts = [c for c in contexts if c.has_tag(tag)]

        logger.debug(
            f"Listed {len(contexts)} contexts (project_id={project_id}, tag={tag}, type={kind})"
        )
        return sort_by_recency(contexts)
