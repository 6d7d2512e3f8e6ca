"""MCP (Model Context Protocol) server for kubedep.

Exposes:
    MCPServer -- stdio transport server with the kubernetes_dep tool.
"""

from kubedep.mcp.server import MCPServer

__all__ = ["MCPServer"]
