#!/usr/bin/env python3
"""
View Management Tools for Iconect MCP Server

Provides saved views over project records: CRUD, duplication, sharing,
data retrieval and export.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import DataQueryInput, IdInput, SortedPageInput, SortSpec, query_flag, request_body

tool_logger = get_tool_logger("views")

ViewType = Literal["list", "grid", "card", "timeline", "calendar", "chart", "map", "custom"]


class Aggregation(CommandInput):
    field: str
    function: Literal["count", "sum", "avg", "min", "max"]
    alias: Optional[str] = None


class BaseQuery(CommandInput):
    filters: Optional[Dict[str, Any]] = None
    sorting: Optional[List[SortSpec]] = None
    grouping: Optional[List[str]] = None
    aggregations: Optional[List[Aggregation]] = None


class ViewField(CommandInput):
    field_id: str = Field(..., alias="fieldId")
    label: Optional[str] = None
    visible: bool = True
    width: Optional[float] = None
    format: Optional[str] = None
    alignment: Literal["left", "center", "right"] = "left"


class DisplayOptions(CommandInput):
    fields: List[ViewField] = Field(..., description="Displayed fields")
    page_size: int = Field(default=25, ge=1, le=1000, alias="pageSize")
    show_filters: bool = Field(default=True, alias="showFilters")
    show_search: bool = Field(default=True, alias="showSearch")
    show_export: bool = Field(default=True, alias="showExport")
    theme: Optional[str] = None
    custom_css: Optional[str] = Field(default=None, alias="customCss")


class DisplayOptionsChanges(DisplayOptions):
    fields: Optional[List[ViewField]] = Field(default=None, description="Displayed fields")
    page_size: Optional[int] = Field(default=None, ge=1, le=1000, alias="pageSize")
    show_filters: Optional[bool] = Field(default=None, alias="showFilters")
    show_search: Optional[bool] = Field(default=None, alias="showSearch")
    show_export: Optional[bool] = Field(default=None, alias="showExport")


class ViewPermissions(CommandInput):
    can_view: Optional[List[str]] = Field(default=None, alias="canView")
    can_edit: Optional[List[str]] = Field(default=None, alias="canEdit")
    can_delete: Optional[List[str]] = Field(default=None, alias="canDelete")
    can_share: Optional[List[str]] = Field(default=None, alias="canShare")


class Sharing(CommandInput):
    is_public: Optional[bool] = Field(default=None, alias="isPublic")
    share_token: Optional[str] = Field(default=None, alias="shareToken")
    expires_at: Optional[str] = Field(default=None, alias="expiresAt")
    allow_anonymous: Optional[bool] = Field(default=None, alias="allowAnonymous")


class ListViewsInput(SortedPageInput):
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only views in this project")
    type: Optional[ViewType] = Field(default=None, description="Only views of this type")
    is_system: Optional[bool] = Field(default=None, alias="isSystem", description="Filter on system views")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Filter on active views")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params.update(request_body(self, include={"project_id", "type"}))
        if self.is_system is not None:
            params["isSystem"] = query_flag(self.is_system)
        if self.is_active is not None:
            params["isActive"] = query_flag(self.is_active)
        return params


class GetViewInput(CommandInput):
    id: str = Field(..., min_length=1, description="View ID")
    include_data: bool = Field(default=False, alias="includeData", description="Include view data")
    data_limit: Optional[int] = Field(default=None, ge=1, le=1000, alias="dataLimit", description="Rows of data to include")


class CreateViewInput(CommandInput):
    name: str = Field(..., min_length=1, description="View name")
    display_name: str = Field(..., min_length=1, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="View description")
    type: ViewType = Field(..., description="View type")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    base_query: BaseQuery = Field(..., alias="baseQuery", description="Filters, sorting, grouping and aggregations")
    display_options: DisplayOptions = Field(..., alias="displayOptions", description="Displayed fields and controls")
    permissions: Optional[ViewPermissions] = Field(default=None, description="Per-action user or role lists")
    sharing: Optional[Sharing] = Field(default=None, description="Sharing settings")


class UpdateViewInput(CommandInput):
    id: str = Field(..., min_length=1, description="View ID")
    name: Optional[str] = Field(default=None, description="View name")
    display_name: Optional[str] = Field(default=None, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="View description")
    base_query: Optional[BaseQuery] = Field(default=None, alias="baseQuery", description="Filters, sorting, grouping and aggregations")
    display_options: Optional[DisplayOptionsChanges] = Field(
        default=None, alias="displayOptions", description="Displayed fields and controls"
    )
    permissions: Optional[ViewPermissions] = Field(default=None, description="Per-action user or role lists")
    sharing: Optional[Sharing] = Field(default=None, description="Sharing settings")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Whether the view is active")


class DuplicateViewInput(CommandInput):
    id: str = Field(..., min_length=1, description="View ID")
    new_name: str = Field(..., min_length=1, alias="newName", description="Name for the copy")
    new_display_name: Optional[str] = Field(default=None, alias="newDisplayName", description="Display name for the copy")
    target_project_id: Optional[str] = Field(default=None, alias="targetProjectId", description="Project receiving the copy")


class ShareViewInput(CommandInput):
    id: str = Field(..., min_length=1, description="View ID")
    is_public: bool = Field(..., alias="isPublic", description="Make the view public")
    expires_at: Optional[str] = Field(default=None, alias="expiresAt", description="Share expiry (ISO-8601)")
    allow_anonymous: bool = Field(default=False, alias="allowAnonymous", description="Allow access without login")


class ExportViewInput(CommandInput):
    id: str = Field(..., min_length=1, description="View ID")
    format: Literal["csv", "xlsx", "pdf", "json"] = Field(..., description="Export format")
    filters: Optional[Dict[str, Any]] = Field(default=None, description="Filters applied before export")
    limit: Optional[int] = Field(default=None, ge=1, le=10000, description="Maximum rows to export")


class ViewTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_views", "List views with optional filtering and pagination", ListViewsInput, self.list_views
            ),
            CommandDescriptor("iconect_get_view", "Get a specific view with optional data", GetViewInput, self.get_view),
            CommandDescriptor("iconect_create_view", "Create a new view", CreateViewInput, self.create_view),
            CommandDescriptor("iconect_update_view", "Update an existing view", UpdateViewInput, self.update_view),
            CommandDescriptor("iconect_delete_view", "Delete a view", IdInput, self.delete_view),
            CommandDescriptor(
                "iconect_duplicate_view", "Duplicate a view with new configuration", DuplicateViewInput, self.duplicate_view
            ),
            CommandDescriptor("iconect_share_view", "Configure view sharing settings", ShareViewInput, self.share_view),
            CommandDescriptor(
                "iconect_get_view_data",
                "Get data for a specific view with filtering and pagination",
                DataQueryInput,
                self.get_view_data,
            ),
            CommandDescriptor("iconect_export_view", "Export view data in various formats", ExportViewInput, self.export_view),
        ]

    async def list_views(self, params: ListViewsInput) -> Dict[str, Any]:
        tool_logger.info("Listing views")
        response = await self.client.get("/views", params=params.to_query_params() or None)
        return success_envelope("Views retrieved successfully", response)

    async def get_view(self, params: GetViewInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting view: {params.id}")
        query: Dict[str, Any] = {}
        if params.include_data:
            query["includeData"] = "true"
        if params.data_limit:
            query["dataLimit"] = params.data_limit
        response = await self.client.get(f"/views/{params.id}", params=query or None)
        return success_envelope("View retrieved successfully", response)

    async def create_view(self, params: CreateViewInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating {params.type} view {params.name} in project {params.project_id}")
        response = await self.client.post("/views", json=request_body(params))
        return success_envelope("View created successfully", response)

    async def update_view(self, params: UpdateViewInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating view: {params.id}")
        response = await self.client.put(f"/views/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("View updated successfully", response)

    async def delete_view(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting view: {params.id}")
        await self.client.delete(f"/views/{params.id}")
        return success_envelope("View deleted successfully", {"id": params.id})

    async def duplicate_view(self, params: DuplicateViewInput) -> Dict[str, Any]:
        tool_logger.info(f"Duplicating view {params.id} as {params.new_name}")
        response = await self.client.post(f"/views/{params.id}/duplicate", json=request_body(params, exclude={"id"}))
        return success_envelope("View duplicated successfully", response)

    async def share_view(self, params: ShareViewInput) -> Dict[str, Any]:
        tool_logger.info(f"Sharing view {params.id} (public={params.is_public})")
        response = await self.client.post(f"/views/{params.id}/share", json=request_body(params, exclude={"id"}))
        return success_envelope("View sharing configured successfully", response)

    async def get_view_data(self, params: DataQueryInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting data for view: {params.id}")
        response = await self.client.post(
            f"/views/{params.id}/data", json=params.to_body(), params=params.to_query_params() or None
        )
        return success_envelope("View data retrieved successfully", response)

    async def export_view(self, params: ExportViewInput) -> Dict[str, Any]:
        tool_logger.info(f"Exporting view {params.id} as {params.format}")
        response = await self.client.post(f"/views/{params.id}/export", json=request_body(params, exclude={"id"}))
        return success_envelope("View export initiated successfully", response)
