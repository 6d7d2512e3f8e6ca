"""MCP stdio server exposing the kubernetes_dep tool."""

from __future__ import annotations

from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from kubedep.graph.builder import ResolutionError
from kubedep.observability.logging import get_logger
from kubedep.params import DEFAULT_DEPTH, MAX_DEPTH, MIN_DEPTH, InvalidParameterError, parse_request
from kubedep.service import DependencyService

_logger = get_logger("mcp.server")

TOOL_NAME = "kubernetes_dep"

DEPENDENCY_TOOL = Tool(
    name=TOOL_NAME,
    description=(
        "Show all dependencies or dependents of any Kubernetes resource as a tree. "
        "Covers OwnerReference chains, Pod->Node/SA/ConfigMap/Secret/PVC, "
        "Service->Pod (label selector), Ingress->IngressClass/Service/TLS Secret, "
        "PVC<->PV->StorageClass, RBAC bindings, PDB->Pod, and Events."
    ),
    inputSchema={
        "type": "object",
        "required": ["cluster", "kind", "name"],
        "properties": {
            "cluster": {
                "type": "string",
                "description": "Cluster ID or kubeconfig context",
            },
            "kind": {
                "type": "string",
                "description": "Resource kind (e.g., deployment, pod, service, ingress, node, or resource.group)",
            },
            "namespace": {
                "type": "string",
                "description": "Namespace name (optional for cluster-scoped resources)",
                "default": "",
            },
            "name": {
                "type": "string",
                "description": "Resource name",
            },
            "direction": {
                "type": "string",
                "description": (
                    "Traversal direction: 'dependents' shows resources that depend on this resource, "
                    "'dependencies' shows resources this resource depends on"
                ),
                "enum": ["dependents", "dependencies"],
                "default": "dependents",
            },
            "depth": {
                "type": "integer",
                "description": f"Maximum traversal depth ({MIN_DEPTH}-{MAX_DEPTH})",
                "default": DEFAULT_DEPTH,
            },
            "format": {
                "type": "string",
                "description": "Output format: tree (human-readable) or json (structured)",
                "enum": ["tree", "json"],
                "default": "tree",
            },
        },
    },
)


class MCPServer:
    """Serves dependency descriptions to MCP clients over stdio.

    Tool failures are raised out of the call handler; the MCP SDK turns
    them into ``isError`` results carrying the exception message.
    """

    def __init__(self, service: DependencyService) -> None:
        self._service = service
        self._server: Server = Server("kubedep")
        self._register()

    @property
    def server(self) -> Server:
        return self._server

    def _register(self) -> None:
        @self._server.list_tools()
        async def list_tools() -> list[Tool]:
            return [DEPENDENCY_TOOL]

        @self._server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
            return await self.handle_call(name, arguments or {})

    async def handle_call(self, name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Run one tool call and return its text content."""
        if name != TOOL_NAME:
            raise ValueError(f"Unknown tool: {name}")

        try:
            request = parse_request(arguments)
        except InvalidParameterError as exc:
            _logger.info("tool_rejected", tool=name, error=str(exc))
            raise

        try:
            output = await self._service.describe(request)
        except ResolutionError as exc:
            raise ResolutionError(f"failed to resolve dependencies: {exc}") from exc

        return [TextContent(type="text", text=output)]

    async def start(self) -> None:
        """Serve on stdin/stdout until the client disconnects."""
        _logger.info("mcp_server_starting", tools=[TOOL_NAME])
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(
                read_stream,
                write_stream,
                self._server.create_initialization_options(),
            )
        _logger.info("mcp_server_stopped")
