"""Save tools — persist project and conversation contexts."""

from __future__ import annotations

from typing import Any

from ctx_memory.models import ConversationContext, ProjectContext, now_iso
from ctx_memory.paths import validate_component
from ctx_memory.service import ContextService
from ctx_memory.tools._validate import (
    optional_mapping,
    optional_text,
    optional_text_list,
    require_str,
    require_text,
)


async def save_project_context(
    service: ContextService,
    id: Any = None,
    projectId: Any = None,
    content: Any = None,
    parentContextId: Any = None,
    references: Any = None,
    tags: Any = None,
    metadata: Any = None,
) -> str:
    """Save (or overwrite) a context under ``projects/<projectId>/``."""
    context = ProjectContext(
        id=validate_component(require_text("id", id), "id"),
        project_id=validate_component(require_text("projectId", projectId), "projectId"),
        content=require_str("content", content),
        timestamp=now_iso(),
        parent_context_id=optional_text("parentContextId", parentContextId),
        references=optional_text_list("references", references),
        tags=optional_text_list("tags", tags),
        metadata=optional_mapping("metadata", metadata),
    )
    service.save(context)
    return f"Project context saved with ID: {context.id}"


async def save_conversation_context(
    service: ContextService,
    id: Any = None,
    sessionId: Any = None,
    content: Any = None,
    continuationOf: Any = None,
    tags: Any = None,
    metadata: Any = None,
) -> str:
    """Save (or overwrite) a context in the conversation partition.

    ``sessionId`` is stored on the record but does not affect where it lives.
    """
    context = ConversationContext(
        id=validate_component(require_text("id", id), "id"),
        session_id=require_str("sessionId", sessionId),
        content=require_str("content", content),
        timestamp=now_iso(),
        continuation_of=optional_text("continuationOf", continuationOf),
        tags=optional_text_list("tags", tags),
        metadata=optional_mapping("metadata", metadata),
    )
    service.save(context)
    return f"Conversation context saved with ID: {context.id}"
