"""Tests for the FastMCP tool surface and the status resource."""

import json

import pytest

from iconect_mcp_server.core.dispatcher import CONFIGURE_COMMAND
from iconect_mcp_server.resources import server_status
from iconect_mcp_server.server import GatewayTool, create_server

from .conftest import BASE_URL, make_credentials


def make_tool(dispatcher, name: str, mcp=None) -> GatewayTool:
    command = next(c for c in dispatcher.list_commands() if c["name"] == name)
    return GatewayTool(
        name=command["name"],
        description=command["description"],
        parameters=command["inputSchema"],
        dispatcher=dispatcher,
        mcp=mcp,
    )


class TestGatewayTool:
    """Tests for tool execution through the dispatcher."""

    @pytest.mark.asyncio
    async def test_result_carries_envelope(self, dispatcher) -> None:
        tool = make_tool(dispatcher, CONFIGURE_COMMAND)

        result = await tool.run({"baseUrl": BASE_URL, "clientId": "c1"})

        assert result.structured_content["success"] is True
        assert json.loads(result.content[0].text) == result.structured_content

    @pytest.mark.asyncio
    async def test_configure_resynchronizes_tools(self, dispatcher) -> None:
        mcp = create_server(dispatcher)
        assert mcp._iconect_tool_names == {CONFIGURE_COMMAND}

        tool = make_tool(dispatcher, CONFIGURE_COMMAND, mcp=mcp)
        await tool.run({"baseUrl": BASE_URL, "clientId": "c1"})

        assert mcp._iconect_tool_names == {command["name"] for command in dispatcher.list_commands()}
        assert len(mcp._iconect_tool_names) > 1

    @pytest.mark.asyncio
    async def test_failed_configure_keeps_tool_list(self, dispatcher) -> None:
        mcp = create_server(dispatcher)
        tool = make_tool(dispatcher, CONFIGURE_COMMAND, mcp=mcp)

        result = await tool.run({"baseUrl": "nope", "clientId": "c1"})

        assert result.structured_content["error"]["code"] == "CONFIGURATION_ERROR"
        assert mcp._iconect_tool_names == {CONFIGURE_COMMAND}


class TestStatusResource:
    """Tests for the iconect://server/status resource."""

    @pytest.mark.asyncio
    async def test_unconfigured(self, dispatcher) -> None:
        status = server_status(dispatcher)

        assert "**Status**: Not configured" in status
        assert "**Advertised**: 1" in status

    @pytest.mark.asyncio
    async def test_configured_and_authenticated(self, configured_dispatcher) -> None:
        configured_dispatcher.session.token_store.set(make_credentials(access_token="secret-access"))

        status = server_status(configured_dispatcher)

        assert "**Status**: Configured" in status
        assert f"**Base URL**: {BASE_URL}" in status
        assert "**Max retries**: 3" in status
        assert "**Authenticated**: yes" in status
        assert "secret-access" not in status
