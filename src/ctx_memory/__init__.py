"""ctx-memory — project and conversation context storage over MCP."""

__version__ = "0.1.0"
