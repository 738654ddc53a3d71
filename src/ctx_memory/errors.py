"""Exceptions raised by the context storage layer."""

from __future__ import annotations


class ContextError(Exception):
    """Base exception for all ctx-memory errors."""


class ContextNotFoundError(ContextError):
    """Raised when no record exists for the requested (id, project)."""

    def __init__(self, context_id: str, project_id: str | None = None) -> None:
        self.context_id = context_id
        self.project_id = project_id
        super().__init__(f"Context not found with ID: {context_id}")


class UnknownOperationError(ContextError):
    """Raised when a tool name is not part of the exposed surface."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class MalformedArgumentsError(ContextError):
    """Raised when tool arguments are missing or have the wrong shape."""


class StorageError(ContextError):
    """Raised on any storage failure other than a missing record."""

    def __init__(self, message: str, path=None) -> None:
        self.path = path
        super().__init__(message)
