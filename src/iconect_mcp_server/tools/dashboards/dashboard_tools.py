#!/usr/bin/env python3
"""
Dashboard Management Tools for Iconect MCP Server

Provides dashboards and their widgets: CRUD, duplication, widget data and
refresh, export and sharing.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, SortedPageInput, query_flag, request_body

tool_logger = get_tool_logger("dashboards")

WidgetType = Literal["chart", "metric", "list", "map", "calendar", "custom"]


class WidgetPosition(CommandInput):
    x: float
    y: float
    width: float
    height: float


class WidgetPositionChanges(CommandInput):
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class NewWidget(CommandInput):
    type: WidgetType = Field(..., description="Widget type")
    title: str = Field(..., description="Widget title")
    position: WidgetPosition = Field(..., description="Grid position and size")
    configuration: Dict[str, Any] = Field(..., description="Widget configuration")
    refresh_interval: Optional[int] = Field(default=None, ge=0, alias="refreshInterval", description="Refresh interval")


class Widget(NewWidget):
    id: str = Field(..., description="Widget ID")


class DashboardLayout(CommandInput):
    columns: int = Field(default=12, ge=1, le=12)
    rows: Optional[int] = Field(default=None, ge=1)
    widgets: List[Widget]


class DashboardLayoutChanges(CommandInput):
    columns: Optional[int] = Field(default=None, ge=1, le=12)
    rows: Optional[int] = Field(default=None, ge=1)
    widgets: Optional[List[Widget]] = None


class DashboardPermissions(CommandInput):
    can_view: Optional[List[str]] = Field(default=None, alias="canView")
    can_edit: Optional[List[str]] = Field(default=None, alias="canEdit")
    can_share: Optional[List[str]] = Field(default=None, alias="canShare")


class ListDashboardsInput(SortedPageInput):
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only dashboards in this project")
    is_default: Optional[bool] = Field(default=None, alias="isDefault", description="Filter on default dashboards")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Filter on active dashboards")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        if self.project_id:
            params["projectId"] = self.project_id
        if self.is_default is not None:
            params["isDefault"] = query_flag(self.is_default)
        if self.is_active is not None:
            params["isActive"] = query_flag(self.is_active)
        return params


class GetDashboardInput(CommandInput):
    id: str = Field(..., min_length=1, description="Dashboard ID")
    include_widget_data: bool = Field(default=False, alias="includeWidgetData", description="Include widget data")


class CreateDashboardInput(CommandInput):
    name: str = Field(..., min_length=1, description="Dashboard name")
    description: Optional[str] = Field(default=None, description="Dashboard description")
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Project ID")
    layout: DashboardLayout = Field(..., description="Grid layout and widgets")
    permissions: Optional[DashboardPermissions] = Field(default=None, description="Per-action user or role lists")
    is_default: bool = Field(default=False, alias="isDefault", description="Make this the default dashboard")


class UpdateDashboardInput(CommandInput):
    id: str = Field(..., min_length=1, description="Dashboard ID")
    name: Optional[str] = Field(default=None, description="Dashboard name")
    description: Optional[str] = Field(default=None, description="Dashboard description")
    layout: Optional[DashboardLayoutChanges] = Field(default=None, description="Grid layout and widgets")
    permissions: Optional[DashboardPermissions] = Field(default=None, description="Per-action user or role lists")
    is_default: Optional[bool] = Field(default=None, alias="isDefault", description="Make this the default dashboard")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Whether the dashboard is active")


class DuplicateDashboardInput(CommandInput):
    id: str = Field(..., min_length=1, description="Dashboard ID")
    new_name: str = Field(..., min_length=1, alias="newName", description="Name for the copy")
    target_project_id: Optional[str] = Field(default=None, alias="targetProjectId", description="Project receiving the copy")


class AddWidgetInput(CommandInput):
    dashboard_id: str = Field(..., min_length=1, alias="dashboardId", description="Dashboard ID")
    widget: NewWidget = Field(..., description="Widget to add")


class WidgetRefInput(CommandInput):
    dashboard_id: str = Field(..., min_length=1, alias="dashboardId", description="Dashboard ID")
    widget_id: str = Field(..., min_length=1, alias="widgetId", description="Widget ID")

    @property
    def path(self) -> str:
        return f"/dashboards/{self.dashboard_id}/widgets/{self.widget_id}"


class UpdateWidgetInput(WidgetRefInput):
    title: Optional[str] = Field(default=None, description="Widget title")
    position: Optional[WidgetPositionChanges] = Field(default=None, description="Grid position and size")
    configuration: Optional[Dict[str, Any]] = Field(default=None, description="Widget configuration")
    refresh_interval: Optional[int] = Field(default=None, ge=0, alias="refreshInterval", description="Refresh interval")


class TimeRange(CommandInput):
    start: str = Field(..., description="Start (ISO-8601)")
    end: str = Field(..., description="End (ISO-8601)")


class WidgetDataInput(WidgetRefInput):
    filters: Optional[Dict[str, Any]] = Field(default=None, description="Filters as key-value pairs")
    date_range: Optional[TimeRange] = Field(default=None, alias="dateRange", description="Date range")


class ExportDashboardInput(CommandInput):
    id: str = Field(..., min_length=1, description="Dashboard ID")
    format: Literal["pdf", "png", "json"] = Field(..., description="Export format")
    include_data: bool = Field(default=True, alias="includeData", description="Include widget data")


class ShareDashboardInput(CommandInput):
    id: str = Field(..., min_length=1, description="Dashboard ID")
    share_type: Literal["public", "private", "token"] = Field(..., alias="shareType", description="Share type")
    expires_at: Optional[str] = Field(default=None, alias="expiresAt", description="Share expiry (ISO-8601)")
    permissions: List[Literal["view", "interact"]] = Field(default_factory=lambda: ["view"], description="Granted access")


WIDGET_REF_FIELDS = {"dashboard_id", "widget_id"}


class DashboardTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_dashboards",
                "List dashboards with optional filtering and pagination",
                ListDashboardsInput,
                self.list_dashboards,
            ),
            CommandDescriptor(
                "iconect_get_dashboard",
                "Get a specific dashboard with optional widget data",
                GetDashboardInput,
                self.get_dashboard,
            ),
            CommandDescriptor("iconect_create_dashboard", "Create a new dashboard", CreateDashboardInput, self.create_dashboard),
            CommandDescriptor(
                "iconect_update_dashboard", "Update an existing dashboard", UpdateDashboardInput, self.update_dashboard
            ),
            CommandDescriptor("iconect_delete_dashboard", "Delete a dashboard", IdInput, self.delete_dashboard),
            CommandDescriptor(
                "iconect_duplicate_dashboard",
                "Duplicate a dashboard with new configuration",
                DuplicateDashboardInput,
                self.duplicate_dashboard,
            ),
            CommandDescriptor("iconect_add_widget", "Add a widget to a dashboard", AddWidgetInput, self.add_widget),
            CommandDescriptor("iconect_update_widget", "Update a widget in a dashboard", UpdateWidgetInput, self.update_widget),
            CommandDescriptor("iconect_remove_widget", "Remove a widget from a dashboard", WidgetRefInput, self.remove_widget),
            CommandDescriptor("iconect_get_widget_data", "Get data for a specific widget", WidgetDataInput, self.get_widget_data),
            CommandDescriptor("iconect_refresh_widget", "Force refresh a widget data", WidgetRefInput, self.refresh_widget),
            CommandDescriptor(
                "iconect_export_dashboard", "Export dashboard in various formats", ExportDashboardInput, self.export_dashboard
            ),
            CommandDescriptor(
                "iconect_share_dashboard", "Configure dashboard sharing settings", ShareDashboardInput, self.share_dashboard
            ),
        ]

    async def list_dashboards(self, params: ListDashboardsInput) -> Dict[str, Any]:
        tool_logger.info("Listing dashboards")
        response = await self.client.get("/dashboards", params=params.to_query_params() or None)
        return success_envelope("Dashboards retrieved successfully", response)

    async def get_dashboard(self, params: GetDashboardInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting dashboard: {params.id}")
        query = {"includeWidgetData": "true"} if params.include_widget_data else None
        response = await self.client.get(f"/dashboards/{params.id}", params=query)
        return success_envelope("Dashboard retrieved successfully", response)

    async def create_dashboard(self, params: CreateDashboardInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating dashboard: {params.name}")
        response = await self.client.post("/dashboards", json=request_body(params))
        return success_envelope("Dashboard created successfully", response)

    async def update_dashboard(self, params: UpdateDashboardInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating dashboard: {params.id}")
        response = await self.client.put(f"/dashboards/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Dashboard updated successfully", response)

    async def delete_dashboard(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting dashboard: {params.id}")
        await self.client.delete(f"/dashboards/{params.id}")
        return success_envelope("Dashboard deleted successfully", {"id": params.id})

    async def duplicate_dashboard(self, params: DuplicateDashboardInput) -> Dict[str, Any]:
        tool_logger.info(f"Duplicating dashboard {params.id} as {params.new_name}")
        response = await self.client.post(f"/dashboards/{params.id}/duplicate", json=request_body(params, exclude={"id"}))
        return success_envelope("Dashboard duplicated successfully", response)

    async def add_widget(self, params: AddWidgetInput) -> Dict[str, Any]:
        tool_logger.info(f"Adding {params.widget.type} widget to dashboard {params.dashboard_id}")
        response = await self.client.post(f"/dashboards/{params.dashboard_id}/widgets", json=request_body(params.widget))
        return success_envelope("Widget added successfully", response)

    async def update_widget(self, params: UpdateWidgetInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating widget {params.widget_id} on dashboard {params.dashboard_id}")
        response = await self.client.put(params.path, json=request_body(params, exclude=WIDGET_REF_FIELDS))
        return success_envelope("Widget updated successfully", response)

    async def remove_widget(self, params: WidgetRefInput) -> Dict[str, Any]:
        tool_logger.info(f"Removing widget {params.widget_id} from dashboard {params.dashboard_id}")
        response = await self.client.delete(params.path)
        return success_envelope("Widget removed successfully", response)

    async def get_widget_data(self, params: WidgetDataInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting data for widget {params.widget_id} on dashboard {params.dashboard_id}")
        response = await self.client.post(f"{params.path}/data", json=request_body(params, exclude=WIDGET_REF_FIELDS))
        return success_envelope("Widget data retrieved successfully", response)

    async def refresh_widget(self, params: WidgetRefInput) -> Dict[str, Any]:
        tool_logger.info(f"Refreshing widget {params.widget_id} on dashboard {params.dashboard_id}")
        response = await self.client.post(f"{params.path}/refresh", json={})
        return success_envelope("Widget refreshed successfully", response)

    async def export_dashboard(self, params: ExportDashboardInput) -> Dict[str, Any]:
        tool_logger.info(f"Exporting dashboard {params.id} as {params.format}")
        response = await self.client.post(f"/dashboards/{params.id}/export", json=request_body(params, exclude={"id"}))
        return success_envelope("Dashboard export initiated successfully", response)

    async def share_dashboard(self, params: ShareDashboardInput) -> Dict[str, Any]:
        tool_logger.info(f"Sharing dashboard {params.id} ({params.share_type})")
        response = await self.client.post(f"/dashboards/{params.id}/share", json=request_body(params, exclude={"id"}))
        return success_envelope("Dashboard sharing configured successfully", response)
