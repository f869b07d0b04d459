#!/usr/bin/env python3
"""
Data Server Management Tools for Iconect MCP Server

Provides data server operations: list, get, create, update and delete.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, ListInput, request_body

tool_logger = get_tool_logger("data_servers")

DataServerStatus = Literal["active", "inactive", "maintenance"]


class CreateDataServerInput(CommandInput):
    name: str = Field(..., min_length=1, description="Data server name")
    description: Optional[str] = Field(default=None, description="Data server description")
    url: str = Field(..., min_length=1, description="Data server URL")
    version: Optional[str] = Field(default=None, description="Data server version")
    status: DataServerStatus = Field(default="active", description="Data server status (default: active)")


class UpdateDataServerInput(CommandInput):
    id: str = Field(..., min_length=1, description="Data server ID")
    name: Optional[str] = Field(default=None, min_length=1, description="Data server name")
    description: Optional[str] = Field(default=None, description="Data server description")
    url: Optional[str] = Field(default=None, description="Data server URL")
    version: Optional[str] = Field(default=None, description="Data server version")
    status: Optional[DataServerStatus] = Field(default=None, description="Data server status")


class DataServerTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_data_servers",
                "List all data servers with optional filtering and pagination",
                ListInput,
                self.list_data_servers,
            ),
            CommandDescriptor("iconect_get_data_server", "Get a specific data server by ID", IdInput, self.get_data_server),
            CommandDescriptor(
                "iconect_create_data_server", "Create a new data server", CreateDataServerInput, self.create_data_server
            ),
            CommandDescriptor(
                "iconect_update_data_server", "Update an existing data server", UpdateDataServerInput, self.update_data_server
            ),
            CommandDescriptor("iconect_delete_data_server", "Delete a data server", IdInput, self.delete_data_server),
        ]

    async def list_data_servers(self, params: ListInput) -> Dict[str, Any]:
        tool_logger.info("Listing data servers")
        response = await self.client.get("/data-servers", params=params.to_query_params())
        return success_envelope("Data servers retrieved successfully", response)

    async def get_data_server(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting data server: {params.id}")
        response = await self.client.get(f"/data-servers/{params.id}")
        return success_envelope("Data server retrieved successfully", response)

    async def create_data_server(self, params: CreateDataServerInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating data server: {params.name}")
        response = await self.client.post("/data-servers", json=request_body(params))
        return success_envelope("Data server created successfully", response)

    async def update_data_server(self, params: UpdateDataServerInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating data server: {params.id}")
        response = await self.client.put(f"/data-servers/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Data server updated successfully", response)

    async def delete_data_server(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting data server: {params.id}")
        await self.client.delete(f"/data-servers/{params.id}")
        return success_envelope("Data server deleted successfully", {"id": params.id})
