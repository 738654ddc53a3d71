"""Recall tools — fetch a single context or list contexts."""

from __future__ import annotations

import logging
from typing import Any

from ctx_memory.errors import ContextNotFoundError
from ctx_memory.service import ContextService
from ctx_memory.tools._validate import optional_text, require_text

logger = logging.getLogger(__name__)


async def get_context(
    service: ContextService,
    id: Any = None,
    projectId: Any = None,
) -> str:
    """Return the ``content`` of the context stored for (id, projectId).

    Raises:
        ContextNotFoundError: no record exists in that scope.
    """
    context_id = require_text("id", id)
    project_id = optional_text("projectId", projectId)
    context = service.get(context_id, project_id)
    if context is None:
        logger.info(f"Context not found: id={context_id} project_id={project_id}")
        raise ContextNotFoundError(context_id, project_id)
    return context.content


async def list_contexts(
    service: ContextService,
    projectId: Any = None,
    tag: Any = None,
    type: Any = None,
) -> list[dict]:
    """List full records, most recent first.

    Args:
        projectId: Only this project's contexts.
        tag: Only contexts carrying this exact tag.
        type: "project" or "conversation".
    """
    contexts = service.list(
        project_id=optional_text("projectId", projectId),
        tag=optional_text("tag", tag),
        kind=optional_text("type", type),
    )
    return [c.to_record() for c in contexts]
