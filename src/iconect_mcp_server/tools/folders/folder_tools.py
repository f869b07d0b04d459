#!/usr/bin/env python3
"""
Folder Management Tools for Iconect MCP Server

Provides folder hierarchy operations within a project.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, SortedPageInput, query_flag, request_body

tool_logger = get_tool_logger("folders")


class FolderPermissions(CommandInput):
    can_read: bool = Field(default=True, alias="canRead")
    can_write: bool = Field(default=False, alias="canWrite")
    can_delete: bool = Field(default=False, alias="canDelete")
    can_create_subfolders: bool = Field(default=False, alias="canCreateSubfolders")


class ListFoldersInput(SortedPageInput):
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    parent_id: Optional[str] = Field(default=None, alias="parentId", description="Only children of this folder")
    include_subfolders: bool = Field(default=False, alias="includeSubfolders", description="Include nested subfolders")
    depth: Optional[int] = Field(default=None, ge=1, le=10, description="Maximum depth when including subfolders")
    is_system: Optional[bool] = Field(default=None, alias="isSystem", description="Filter on system folders")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params["projectId"] = self.project_id
        if self.parent_id:
            params["parentId"] = self.parent_id
        if self.include_subfolders:
            params["includeSubfolders"] = "true"
        if self.depth is not None:
            params["depth"] = self.depth
        if self.is_system is not None:
            params["isSystem"] = query_flag(self.is_system)
        return params


class GetFolderInput(CommandInput):
    id: str = Field(..., min_length=1, description="Folder ID")
    include_ancestors: bool = Field(default=False, alias="includeAncestors", description="Include ancestor folders")
    include_children: bool = Field(default=False, alias="includeChildren", description="Include child folders")
    include_stats: bool = Field(default=False, alias="includeStats", description="Include record and file counts")


class CreateFolderInput(CommandInput):
    name: str = Field(..., min_length=1, description="Folder name")
    description: Optional[str] = Field(default=None, description="Folder description")
    parent_id: Optional[str] = Field(default=None, alias="parentId", description="Parent folder ID")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    permissions: Optional[FolderPermissions] = Field(default=None, description="Folder permissions")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class UpdateFolderInput(CommandInput):
    id: str = Field(..., min_length=1, description="Folder ID")
    name: Optional[str] = Field(default=None, description="Folder name")
    description: Optional[str] = Field(default=None, description="Folder description")
    parent_id: Optional[str] = Field(default=None, alias="parentId", description="Parent folder ID")
    permissions: Optional[FolderPermissions] = Field(default=None, description="Folder permissions")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class DeleteFolderInput(CommandInput):
    id: str = Field(..., min_length=1, description="Folder ID")
    recursive: bool = Field(default=False, description="Delete subfolders and contents")
    move_contents_to: Optional[str] = Field(
        default=None, alias="moveContentsTo", description="Folder ID that receives the contents"
    )


class MoveFolderInput(CommandInput):
    id: str = Field(..., min_length=1, description="Folder ID")
    new_parent_id: Optional[str] = Field(
        default=None, alias="newParentId", description="New parent folder ID (omit for the project root)"
    )


class CopyFolderInput(CommandInput):
    id: str = Field(..., min_length=1, description="Source folder ID")
    target_parent_id: Optional[str] = Field(default=None, alias="targetParentId", description="Target parent folder ID")
    new_name: Optional[str] = Field(default=None, alias="newName", description="Name for the copy")
    include_contents: bool = Field(default=True, alias="includeContents", description="Copy the folder contents")
    target_project_id: Optional[str] = Field(default=None, alias="targetProjectId", description="Target project ID")


class GetFolderTreeInput(CommandInput):
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    root_folder_id: Optional[str] = Field(default=None, alias="rootFolderId", description="Folder to start from")
    max_depth: int = Field(default=5, ge=1, le=20, alias="maxDepth", description="Maximum tree depth (default: 5)")
    include_stats: bool = Field(default=False, alias="includeStats", description="Include per-folder counts")


class FolderTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_folders",
                "List folders with optional filtering and hierarchy options",
                ListFoldersInput,
                self.list_folders,
            ),
            CommandDescriptor(
                "iconect_get_folder", "Get a specific folder with optional related data", GetFolderInput, self.get_folder
            ),
            CommandDescriptor("iconect_create_folder", "Create a new folder", CreateFolderInput, self.create_folder),
            CommandDescriptor("iconect_update_folder", "Update an existing folder", UpdateFolderInput, self.update_folder),
            CommandDescriptor(
                "iconect_delete_folder",
                "Delete a folder with options for handling contents",
                DeleteFolderInput,
                self.delete_folder,
            ),
            CommandDescriptor(
                "iconect_move_folder", "Move a folder to a new parent location", MoveFolderInput, self.move_folder
            ),
            CommandDescriptor("iconect_copy_folder", "Copy a folder to a new location", CopyFolderInput, self.copy_folder),
            CommandDescriptor(
                "iconect_get_folder_tree", "Get folder tree structure for a project", GetFolderTreeInput, self.get_folder_tree
            ),
            CommandDescriptor(
                "iconect_get_folder_path", "Get the full path from root to a specific folder", IdInput, self.get_folder_path
            ),
        ]

    async def list_folders(self, params: ListFoldersInput) -> Dict[str, Any]:
        tool_logger.info(f"Listing folders in project: {params.project_id}")
        response = await self.client.get("/folders", params=params.to_query_params())
        return success_envelope("Folders retrieved successfully", response)

    async def get_folder(self, params: GetFolderInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting folder: {params.id}")
        query = {}
        if params.include_ancestors:
            query["includeAncestors"] = "true"
        if params.include_children:
            query["includeChildren"] = "true"
        if params.include_stats:
            query["includeStats"] = "true"
        response = await self.client.get(f"/folders/{params.id}", params=query or None)
        return success_envelope("Folder retrieved successfully", response)

    async def create_folder(self, params: CreateFolderInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating folder {params.name} in project {params.project_id}")
        response = await self.client.post("/folders", json=request_body(params))
        return success_envelope("Folder created successfully", response)

    async def update_folder(self, params: UpdateFolderInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating folder: {params.id}")
        response = await self.client.put(f"/folders/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Folder updated successfully", response)

    async def delete_folder(self, params: DeleteFolderInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting folder: {params.id} (recursive={params.recursive})")
        query = {}
        if params.recursive:
            query["recursive"] = "true"
        if params.move_contents_to:
            query["moveContentsTo"] = params.move_contents_to
        await self.client.delete(f"/folders/{params.id}", params=query or None)
        data = {"id": params.id, "recursive": params.recursive}
        if params.move_contents_to:
            data["moveContentsTo"] = params.move_contents_to
        return success_envelope("Folder deleted successfully", data)

    async def move_folder(self, params: MoveFolderInput) -> Dict[str, Any]:
        tool_logger.info(f"Moving folder {params.id} under {params.new_parent_id or 'root'}")
        response = await self.client.post(f"/folders/{params.id}/move", json=request_body(params, exclude={"id"}))
        return success_envelope("Folder moved successfully", response)

    async def copy_folder(self, params: CopyFolderInput) -> Dict[str, Any]:
        tool_logger.info(f"Copying folder: {params.id}")
        response = await self.client.post(f"/folders/{params.id}/copy", json=request_body(params, exclude={"id"}))
        return success_envelope("Folder copied successfully", response)

    async def get_folder_tree(self, params: GetFolderTreeInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting folder tree for project: {params.project_id}")
        query: Dict[str, Any] = {"projectId": params.project_id, "maxDepth": params.max_depth}
        if params.root_folder_id:
            query["rootFolderId"] = params.root_folder_id
        if params.include_stats:
            query["includeStats"] = "true"
        response = await self.client.get("/folders/tree", params=query)
        return success_envelope("Folder tree retrieved successfully", response)

    async def get_folder_path(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting folder path: {params.id}")
        response = await self.client.get(f"/folders/{params.id}/path")
        return success_envelope("Folder path retrieved successfully", response)
