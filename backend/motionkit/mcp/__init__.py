"""MCP (Model Context Protocol) server for stateless project editing.

Each tool call carries an explicit ``project_id``: the server loads the
stored document, applies exactly one mutation through the shared tool
registry and saves the result. Positional ``layer_N`` aliases are rejected
because there is no chat turn to count them against.

Requirements:
    pip install "mcp[cli]" httpx

Environment Variables:
    PROJECT_API_URL: Host application API (default: http://localhost:8000)
    PROJECT_API_KEY: API key (recommended)
    PROJECT_API_TOKEN: Bearer token fallback

Usage:
    motionkit-mcp
    mcp run motionkit.mcp.server:mcp_server
"""

from motionkit.mcp.server import mcp_server

__all__ = ["mcp_server"]
