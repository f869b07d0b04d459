#!/usr/bin/env python3
"""
Client Management Tools for Iconect MCP Server
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, ListInput, request_body

tool_logger = get_tool_logger("clients")

ClientStatus = Literal["active", "inactive"]


class CreateClientInput(CommandInput):
    name: str = Field(..., min_length=1, description="Client name")
    description: Optional[str] = Field(default=None, description="Client description")
    status: ClientStatus = Field(default="active", description="Client status (default: active)")
    settings: Optional[Dict[str, Any]] = Field(default=None, description="Client settings as key-value pairs")


class UpdateClientInput(CommandInput):
    id: str = Field(..., min_length=1, description="Client ID")
    name: Optional[str] = Field(default=None, min_length=1, description="Client name")
    description: Optional[str] = Field(default=None, description="Client description")
    status: Optional[ClientStatus] = Field(default=None, description="Client status")
    settings: Optional[Dict[str, Any]] = Field(default=None, description="Client settings as key-value pairs")


class ClientTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_clients", "List all clients with optional filtering and pagination", ListInput, self.list_clients
            ),
            CommandDescriptor("iconect_get_client", "Get a specific client by ID", IdInput, self.get_client),
            CommandDescriptor("iconect_create_client", "Create a new client", CreateClientInput, self.create_client),
            CommandDescriptor("iconect_update_client", "Update an existing client", UpdateClientInput, self.update_client),
            CommandDescriptor("iconect_delete_client", "Delete a client", IdInput, self.delete_client),
        ]

    async def list_clients(self, params: ListInput) -> Dict[str, Any]:
        tool_logger.info("Listing clients")
        response = await self.client.get("/clients", params=params.to_query_params())
        return success_envelope("Clients retrieved successfully", response)

    async def get_client(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting client: {params.id}")
        response = await self.client.get(f"/clients/{params.id}")
        return success_envelope("Client retrieved successfully", response)

    async def create_client(self, params: CreateClientInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating client: {params.name}")
        response = await self.client.post("/clients", json=request_body(params))
        return success_envelope("Client created successfully", response)

    async def update_client(self, params: UpdateClientInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating client: {params.id}")
        response = await self.client.put(f"/clients/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Client updated successfully", response)

    async def delete_client(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting client: {params.id}")
        await self.client.delete(f"/clients/{params.id}")
        return success_envelope("Client deleted successfully", {"id": params.id})
