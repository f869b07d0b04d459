#!/usr/bin/env python3
"""
Project Management Tools for Iconect MCP Server

Provides project operations for listing, inspecting, creating, updating and
deleting projects.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, ListInput, request_body

tool_logger = get_tool_logger("projects")

ProjectStatus = Literal["active", "inactive", "archived"]


class CreateProjectInput(CommandInput):
    name: str = Field(..., min_length=1, description="Project name")
    description: Optional[str] = Field(default=None, description="Project description")
    client_id: str = Field(..., min_length=1, alias="clientId", description="Client ID")
    data_server_id: str = Field(..., min_length=1, alias="dataServerId", description="Data server ID")
    status: ProjectStatus = Field(default="active", description="Project status (default: active)")
    settings: Optional[Dict[str, Any]] = Field(default=None, description="Project settings as key-value pairs")


class UpdateProjectInput(CommandInput):
    id: str = Field(..., min_length=1, description="Project ID")
    name: Optional[str] = Field(default=None, min_length=1, description="Project name")
    description: Optional[str] = Field(default=None, description="Project description")
    client_id: Optional[str] = Field(default=None, alias="clientId", description="Client ID")
    data_server_id: Optional[str] = Field(default=None, alias="dataServerId", description="Data server ID")
    status: Optional[ProjectStatus] = Field(default=None, description="Project status")
    settings: Optional[Dict[str, Any]] = Field(default=None, description="Project settings as key-value pairs")


class ProjectTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_projects",
                "List all projects with optional filtering and pagination",
                ListInput,
                self.list_projects,
            ),
            CommandDescriptor("iconect_get_project", "Get a specific project by ID", IdInput, self.get_project),
            CommandDescriptor("iconect_create_project", "Create a new project", CreateProjectInput, self.create_project),
            CommandDescriptor("iconect_update_project", "Update an existing project", UpdateProjectInput, self.update_project),
            CommandDescriptor("iconect_delete_project", "Delete a project", IdInput, self.delete_project),
        ]

    async def list_projects(self, params: ListInput) -> Dict[str, Any]:
        query = params.to_query_params()
        tool_logger.info(f"Listing projects with options: {query}")
        response = await self.client.get("/projects", params=query)
        return success_envelope("Projects retrieved successfully", response)

    async def get_project(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting project: {params.id}")
        response = await self.client.get(f"/projects/{params.id}")
        return success_envelope("Project retrieved successfully", response)

    async def create_project(self, params: CreateProjectInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating project: {params.name}")
        response = await self.client.post("/projects", json=request_body(params))
        return success_envelope("Project created successfully", response)

    async def update_project(self, params: UpdateProjectInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating project: {params.id}")
        response = await self.client.put(f"/projects/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Project updated successfully", response)

    async def delete_project(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting project: {params.id}")
        await self.client.delete(f"/projects/{params.id}")
        return success_envelope("Project deleted successfully", {"id": params.id})
