#!/usr/bin/env python3
"""
Panel Management Tools for Iconect MCP Server

Provides panel (grid, form, chart and report views over project data)
operations, including data retrieval and export.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import DataQueryInput, IdInput, SortedPageInput, query_flag, request_body

tool_logger = get_tool_logger("panels")

PanelType = Literal["grid", "form", "chart", "report", "dashboard", "custom"]
ExportFormat = Literal["csv", "xlsx", "pdf", "json"]


class PanelColumn(CommandInput):
    id: str
    name: str
    field_id: Optional[str] = Field(default=None, alias="fieldId")
    width: Optional[float] = None
    sortable: bool = True
    filterable: bool = True
    visible: bool = True
    alignment: Literal["left", "center", "right"] = "left"
    format: Optional[str] = None


class PanelPagination(CommandInput):
    enabled: bool = True
    page_size: int = Field(default=25, ge=1, le=1000, alias="pageSize")
    page_size_options: Optional[List[int]] = Field(default=None, alias="pageSizeOptions")


class PanelSorting(CommandInput):
    default_sort: Optional[str] = Field(default=None, alias="defaultSort")
    default_order: Literal["asc", "desc"] = Field(default="asc", alias="defaultOrder")
    multi_sort: bool = Field(default=False, alias="multiSort")


class PanelFiltering(CommandInput):
    enabled: bool = True
    quick_search: bool = Field(default=True, alias="quickSearch")
    advanced_filters: bool = Field(default=False, alias="advancedFilters")


class PanelLayout(CommandInput):
    columns: List[PanelColumn] = Field(..., description="Column definitions")
    pagination: Optional[PanelPagination] = None
    sorting: Optional[PanelSorting] = None
    filtering: Optional[PanelFiltering] = None


class PanelConfiguration(CommandInput):
    theme: Optional[str] = None
    responsive: bool = True
    export_options: Optional[List[ExportFormat]] = Field(default=None, alias="exportOptions")
    refresh_interval: Optional[int] = Field(default=None, ge=0, alias="refreshInterval")
    cache_timeout: Optional[int] = Field(default=None, ge=0, alias="cacheTimeout")


class PanelPermissions(CommandInput):
    can_view: Optional[List[str]] = Field(default=None, alias="canView")
    can_edit: Optional[List[str]] = Field(default=None, alias="canEdit")
    can_delete: Optional[List[str]] = Field(default=None, alias="canDelete")
    can_export: Optional[List[str]] = Field(default=None, alias="canExport")


class ListPanelsInput(SortedPageInput):
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only panels in this project")
    type: Optional[PanelType] = Field(default=None, description="Only panels of this type")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Only panels in this folder")
    is_system: Optional[bool] = Field(default=None, alias="isSystem", description="Filter on system panels")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Filter on active panels")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params.update(request_body(self, include={"project_id", "type", "folder_id"}))
        if self.is_system is not None:
            params["isSystem"] = query_flag(self.is_system)
        if self.is_active is not None:
            params["isActive"] = query_flag(self.is_active)
        return params


class GetPanelInput(CommandInput):
    id: str = Field(..., min_length=1, description="Panel ID")
    include_data: bool = Field(default=False, alias="includeData", description="Include panel data")
    data_limit: Optional[int] = Field(default=None, ge=1, le=1000, alias="dataLimit", description="Rows of data to include")


class CreatePanelInput(CommandInput):
    name: str = Field(..., min_length=1, description="Panel name")
    display_name: str = Field(..., min_length=1, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="Panel description")
    type: PanelType = Field(..., description="Panel type")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Folder ID")
    layout: PanelLayout = Field(..., description="Columns, pagination, sorting and filtering")
    configuration: Optional[PanelConfiguration] = Field(default=None, description="Display configuration")
    permissions: Optional[PanelPermissions] = Field(default=None, description="Per-action user or role lists")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class UpdatePanelInput(CommandInput):
    id: str = Field(..., min_length=1, description="Panel ID")
    name: Optional[str] = Field(default=None, description="Panel name")
    display_name: Optional[str] = Field(default=None, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="Panel description")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Folder ID")
    layout: Optional[PanelLayout] = Field(default=None, description="Columns, pagination, sorting and filtering")
    configuration: Optional[PanelConfiguration] = Field(default=None, description="Display configuration")
    permissions: Optional[PanelPermissions] = Field(default=None, description="Per-action user or role lists")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Whether the panel is active")


class DuplicatePanelInput(CommandInput):
    id: str = Field(..., min_length=1, description="Panel ID")
    new_name: str = Field(..., min_length=1, alias="newName", description="Name for the copy")
    new_display_name: Optional[str] = Field(default=None, alias="newDisplayName", description="Display name for the copy")
    target_project_id: Optional[str] = Field(default=None, alias="targetProjectId", description="Project receiving the copy")
    target_folder_id: Optional[str] = Field(default=None, alias="targetFolderId", description="Folder receiving the copy")


class ExportPanelInput(CommandInput):
    id: str = Field(..., min_length=1, description="Panel ID")
    format: ExportFormat = Field(..., description="Export format")
    include_data: bool = Field(default=True, alias="includeData", description="Include panel data")
    filters: Optional[Dict[str, Any]] = Field(default=None, description="Filters applied before export")
    limit: Optional[int] = Field(default=None, ge=1, le=10000, description="Maximum rows to export")


class PanelTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_panels", "List panels with optional filtering and pagination", ListPanelsInput, self.list_panels
            ),
            CommandDescriptor("iconect_get_panel", "Get a specific panel with optional data", GetPanelInput, self.get_panel),
            CommandDescriptor("iconect_create_panel", "Create a new panel", CreatePanelInput, self.create_panel),
            CommandDescriptor("iconect_update_panel", "Update an existing panel", UpdatePanelInput, self.update_panel),
            CommandDescriptor("iconect_delete_panel", "Delete a panel", IdInput, self.delete_panel),
            CommandDescriptor(
                "iconect_duplicate_panel", "Duplicate a panel with new configuration", DuplicatePanelInput, self.duplicate_panel
            ),
            CommandDescriptor("iconect_export_panel", "Export panel data in various formats", ExportPanelInput, self.export_panel),
            CommandDescriptor(
                "iconect_get_panel_data",
                "Get data for a specific panel with filtering and pagination",
                DataQueryInput,
                self.get_panel_data,
            ),
        ]

    async def list_panels(self, params: ListPanelsInput) -> Dict[str, Any]:
        tool_logger.info("Listing panels")
        response = await self.client.get("/panels", params=params.to_query_params() or None)
        return success_envelope("Panels retrieved successfully", response)

    async def get_panel(self, params: GetPanelInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting panel: {params.id}")
        query: Dict[str, Any] = {}
        if params.include_data:
            query["includeData"] = "true"
        if params.data_limit:
            query["dataLimit"] = params.data_limit
        response = await self.client.get(f"/panels/{params.id}", params=query or None)
        return success_envelope("Panel retrieved successfully", response)

    async def create_panel(self, params: CreatePanelInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating {params.type} panel {params.name} in project {params.project_id}")
        response = await self.client.post("/panels", json=request_body(params))
        return success_envelope("Panel created successfully", response)

    async def update_panel(self, params: UpdatePanelInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating panel: {params.id}")
        response = await self.client.put(f"/panels/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Panel updated successfully", response)

    async def delete_panel(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting panel: {params.id}")
        await self.client.delete(f"/panels/{params.id}")
        return success_envelope("Panel deleted successfully", {"id": params.id})

    async def duplicate_panel(self, params: DuplicatePanelInput) -> Dict[str, Any]:
        tool_logger.info(f"Duplicating panel {params.id} as {params.new_name}")
        response = await self.client.post(f"/panels/{params.id}/duplicate", json=request_body(params, exclude={"id"}))
        return success_envelope("Panel duplicated successfully", response)

    async def export_panel(self, params: ExportPanelInput) -> Dict[str, Any]:
        tool_logger.info(f"Exporting panel {params.id} as {params.format}")
        response = await self.client.post(f"/panels/{params.id}/export", json=request_body(params, exclude={"id"}))
        return success_envelope("Panel export initiated successfully", response)

    async def get_panel_data(self, params: DataQueryInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting data for panel: {params.id}")
        response = await self.client.post(
            f"/panels/{params.id}/data", json=params.to_body(), params=params.to_query_params() or None
        )
        return success_envelope("Panel data retrieved successfully", response)
