#!/usr/bin/env python3
"""
File Store Management Tools for Iconect MCP Server

Provides file store operations for viewing, provisioning and maintaining the
storage backends that project files live in, plus capacity statistics.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, ListInput, request_body

tool_logger = get_tool_logger("file_stores")

FileStoreType = Literal["local", "s3", "azure", "gcp"]
FileStoreStatus = Literal["active", "inactive", "maintenance"]


class CreateFileStoreInput(CommandInput):
    name: str = Field(..., min_length=1, description="File store name")
    description: Optional[str] = Field(default=None, description="File store description")
    path: str = Field(..., min_length=1, description="Storage path or bucket location")
    type: FileStoreType = Field(..., description="Storage backend type")
    status: FileStoreStatus = Field(default="active", description="File store status (default: active)")
    capacity: Optional[float] = Field(default=None, gt=0, description="Capacity in bytes")
    settings: Optional[Dict[str, Any]] = Field(default=None, description="Backend-specific settings")


class UpdateFileStoreInput(CommandInput):
    id: str = Field(..., min_length=1, description="File store ID")
    name: Optional[str] = Field(default=None, min_length=1, description="File store name")
    description: Optional[str] = Field(default=None, description="File store description")
    path: Optional[str] = Field(default=None, description="Storage path or bucket location")
    type: Optional[FileStoreType] = Field(default=None, description="Storage backend type")
    status: Optional[FileStoreStatus] = Field(default=None, description="File store status")
    capacity: Optional[float] = Field(default=None, gt=0, description="Capacity in bytes")
    settings: Optional[Dict[str, Any]] = Field(default=None, description="Backend-specific settings")


class FileStoreTools:
    """File store commands. Stats are computed upstream; this module only relays them."""

    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_file_stores",
                "List all file stores with optional filtering and pagination",
                ListInput,
                self.list_file_stores,
            ),
            CommandDescriptor("iconect_get_file_store", "Get a specific file store by ID", IdInput, self.get_file_store),
            CommandDescriptor(
                "iconect_create_file_store", "Create a new file store", CreateFileStoreInput, self.create_file_store
            ),
            CommandDescriptor(
                "iconect_update_file_store", "Update an existing file store", UpdateFileStoreInput, self.update_file_store
            ),
            CommandDescriptor("iconect_delete_file_store", "Delete a file store", IdInput, self.delete_file_store),
            CommandDescriptor(
                "iconect_get_file_store_stats",
                "Get usage statistics (capacity, used space, file count) for a file store",
                IdInput,
                self.get_file_store_stats,
            ),
        ]

    async def list_file_stores(self, params: ListInput) -> Dict[str, Any]:
        tool_logger.info("Listing file stores")
        response = await self.client.get("/file-stores", params=params.to_query_params())
        return success_envelope("File stores retrieved successfully", response)

    async def get_file_store(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting file store: {params.id}")
        response = await self.client.get(f"/file-stores/{params.id}")
        return success_envelope("File store retrieved successfully", response)

    async def create_file_store(self, params: CreateFileStoreInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating file store: {params.name} ({params.type})")
        response = await self.client.post("/file-stores", json=request_body(params))
        return success_envelope("File store created successfully", response)

    async def update_file_store(self, params: UpdateFileStoreInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating file store: {params.id}")
        response = await self.client.put(f"/file-stores/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("File store updated successfully", response)

    async def delete_file_store(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting file store: {params.id}")
        await self.client.delete(f"/file-stores/{params.id}")
        return success_envelope("File store deleted successfully", {"id": params.id})

    async def get_file_store_stats(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting file store stats: {params.id}")
        response = await self.client.get(f"/file-stores/{params.id}/stats")
        return success_envelope("File store statistics retrieved successfully", response)
