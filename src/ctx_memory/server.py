"""MCP server entry point — exposes the context tools over stdio."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    CallToolRequest,
    CallToolResult,
    ErrorData,
    ServerResult,
    TextContent,
    Tool,
)

from ctx_memory.config import get_settings
from ctx_memory.errors import (
    ContextError,
    ContextNotFoundError,
    MalformedArgumentsError,
    StorageError,
    UnknownOperationError,
)
from ctx_memory.service import ContextService
from ctx_memory.tools import recall, save

logger = logging.getLogger(__name__)

# Create MCP server
app = Server("ctx-memory")

_TAGS_SCHEMA = {"type": "array", "items": {"type": "string"}, "description": "Tags for categorization"}
_METADATA_SCHEMA = {"type": "object", "description": "Additional metadata"}


# ---------------------------------------------------------------------------
# Tool Definitions
# ---------------------------------------------------------------------------

TOOLS = [
    Tool(
        name="save_project_context",
        description="Save context for a specific project",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Unique identifier for this context"},
                "projectId": {"type": "string", "description": "Project identifier"},
                "content": {"type": "string", "description": "Context content to save"},
                "parentContextId": {"type": "string", "description": "Optional parent context ID"},
                "references": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional related context IDs",
                },
                "tags": _TAGS_SCHEMA,
                "metadata": _METADATA_SCHEMA,
            },
            "required": ["id", "projectId", "content"],
        },
    ),
    Tool(
        name="save_conversation_context",
        description="Save context from a conversation session",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Unique identifier for this context"},
                "sessionId": {"type": "string", "description": "Conversation session identifier"},
                "content": {"type": "string", "description": "Context content to save"},
                "continuationOf": {"type": "string", "description": "Optional ID of the context this continues"},
                "tags": _TAGS_SCHEMA,
                "metadata": _METADATA_SCHEMA,
            },
            "required": ["id", "sessionId", "content"],
        },
    ),
    Tool(
        name="get_context",
        description="Retrieve context by ID and optional project ID",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the context to retrieve"},
                "projectId": {"type": "string", "description": "Optional project ID for project contexts"},
            },
            "required": ["id"],
        },
    ),
    Tool(
        name="list_contexts",
        description="List contexts with filtering options",
        inputSchema={
            "type": "object",
            "properties": {
                "projectId": {"type": "string", "description": "Optional project ID to filter by"},
                "tag": {"type": "string", "description": "Optional tag to filter by"},
                "type": {
                    "type": "string",
                    "enum": ["project", "conversation"],
                    "description": "Optional type to filter by",
                },
            },
        },
    ),
]

_TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}

_HANDLERS = {
    "save_project_context": save.save_project_context,
    "save_conversation_context": save.save_conversation_context,
    "get_context": recall.get_context,
    "list_contexts": recall.list_contexts,
}

_ERROR_CODES = {
    ContextNotFoundError: INVALID_REQUEST,
    UnknownOperationError: METHOD_NOT_FOUND,
    MalformedArgumentsError: INVALID_PARAMS,
    StorageError: INTERNAL_ERROR,
}


def _known_arguments(name: str, arguments: Any) -> dict:
    """Drop argument names the tool does not declare, logging them."""
    if arguments is None:
        return {}
    if not isinstance(arguments, dict):
        raise MalformedArgumentsError("Tool arguments must be an object")
    allowed = _TOOLS_BY_NAME[name].inputSchema.get("properties", {})
    unknown = sorted(set(arguments) - set(allowed))
    if unknown:
        logger.warning(f"Ignoring unexpected arguments for {name}: {', '.join(unknown)}")
    return {k: v for k, v in arguments.items() if k in allowed}


def to_mcp_error(error: ContextError) -> McpError:
    """Map a domain error onto an MCP error with a machine-readable code."""
    code = INTERNAL_ERROR
    for error_type, error_code in _ERROR_CODES.items():
        if isinstance(error, error_type):
            code = error_code
            break
    return McpError(ErrorData(code=code, message=str(error)))


async def dispatch(service: ContextService, name: str, arguments: Any) -> str:
    """Run a tool and return its result as text.

    Raises:
        McpError: for unknown tools, bad arguments, missing contexts and
            storage failures.
    """
    try:
        handler = _HANDLERS.get(name)
        if handler is None:
            raise UnknownOperationError(name)
        result = await handler(service, **_known_arguments(name, arguments))
    except ContextError as e:
        if isinstance(e, StorageError):
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
        else:
            logger.warning(f"Tool {name} rejected: {e}")
        raise to_mcp_error(e) from e

    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, ensure_ascii=False)


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return TOOLS


async def call_tool(req: CallToolRequest) -> ServerResult:
    """Handle tool calls.

    Registered directly on ``app.request_handlers`` so an ``McpError`` reaches
    the client as a JSON-RPC error with its code, instead of being folded into
    an ``isError`` tool result.
    """
    name = req.params.name
    logger.info(f"Tool called: {name}")
    text = await dispatch(ContextService.get_instance(), name, req.params.arguments)
    return ServerResult(CallToolResult(content=[TextContent(type="text", text=text)], isError=False))


app.request_handlers[CallToolRequest] = call_tool


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

async def run() -> None:
    """Run the MCP stdio loop using the current mcp-python API."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options(),
        )


def main():
    """Run the MCP server."""
    import asyncio

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), stream=sys.stderr)

    service = ContextService.get_instance(settings)
    logger.info("Starting ctx-memory MCP server...")
    logger.info(f"Storage root: {service.paths.root}")

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
