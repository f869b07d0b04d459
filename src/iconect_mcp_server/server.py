#!/usr/bin/env python3
"""
Iconect MCP Server - FastMCP Surface

Exposes the dispatcher's advertised commands as FastMCP tools. The tool set
is rebuilt from Dispatcher.list_commands() whenever configuration changes,
so before iconect_configure succeeds only iconect_configure is listed.
"""

import json
import logging
from typing import Any, Dict, Optional, Set

from fastmcp import FastMCP
from fastmcp.tools.tool import Tool, ToolResult
from pydantic import Field

from .core.dispatcher import CONFIGURE_COMMAND, Dispatcher
from .resources import server_status

SERVER_NAME = "iconect-mcp-server"

logger = logging.getLogger("iconect.server")


class GatewayTool(Tool):
    """A FastMCP tool whose execution is delegated to the dispatcher."""

    dispatcher: Any = Field(exclude=True)
    mcp: Optional[Any] = Field(default=None, exclude=True)

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        envelope = await self.dispatcher.dispatch(self.name, arguments)
        if self.name == CONFIGURE_COMMAND and envelope.get("success") and self.mcp is not None:
            sync_tools(self.mcp, self.dispatcher)
        return ToolResult(content=json.dumps(envelope, indent=2), structured_content=envelope)


def sync_tools(mcp: FastMCP, dispatcher: Dispatcher) -> Set[str]:
    """Make the FastMCP tool list mirror the dispatcher's advertised commands."""
    registered: Set[str] = getattr(mcp, "_iconect_tool_names", set())
    advertised = dispatcher.list_commands()
    names = {command["name"] for command in advertised}

    for stale in registered - names:
        mcp.remove_tool(stale)

    # Re-added on every sync: descriptions or schemas may differ after reconfigure.
    for command in advertised:
        if command["name"] in registered:
            mcp.remove_tool(command["name"])
        mcp.add_tool(
            GatewayTool(
                name=command["name"],
                description=command["description"],
                parameters=command["inputSchema"],
                dispatcher=dispatcher,
                mcp=mcp,
            )
        )

    mcp._iconect_tool_names = names
    logger.info(f"Tool list synchronized: {len(names)} tools advertised")
    return names


def create_server(dispatcher: Dispatcher) -> FastMCP:
    """Build the FastMCP server with tools and the status resource."""
    mcp = FastMCP(SERVER_NAME)
    sync_tools(mcp, dispatcher)

    @mcp.resource("iconect://server/status")
    async def status_resource() -> str:
        """Current gateway configuration and authentication status."""
        return server_status(dispatcher)

    return mcp
