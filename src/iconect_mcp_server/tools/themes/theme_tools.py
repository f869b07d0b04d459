#!/usr/bin/env python3
"""
Theme Management Tools for Iconect MCP Server

Themes are palettes plus optional typography, spacing, radius and shadow
scales. They can be applied globally, per user or per project.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, SortedPageInput, query_flag, request_body

tool_logger = get_tool_logger("themes")

ThemeType = Literal["light", "dark", "custom"]
ThemeScope = Literal["global", "user", "project"]
ThemeFormat = Literal["json", "css", "scss"]


class Palette(CommandInput):
    primary: str
    secondary: str
    accent: str
    background: str
    surface: str
    text: str
    text_secondary: str = Field(..., alias="textSecondary")
    border: str
    success: str
    warning: str
    error: str
    info: str


class PaletteChanges(Palette):
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    background: Optional[str] = None
    surface: Optional[str] = None
    text: Optional[str] = None
    text_secondary: Optional[str] = Field(default=None, alias="textSecondary")
    border: Optional[str] = None
    success: Optional[str] = None
    warning: Optional[str] = None
    error: Optional[str] = None
    info: Optional[str] = None


class FontSizes(CommandInput):
    small: Optional[str] = None
    medium: Optional[str] = None
    large: Optional[str] = None
    xlarge: Optional[str] = None


class FontWeights(CommandInput):
    light: Optional[int] = None
    normal: Optional[int] = None
    medium: Optional[int] = None
    bold: Optional[int] = None


class Typography(CommandInput):
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    font_size: Optional[FontSizes] = Field(default=None, alias="fontSize")
    font_weight: Optional[FontWeights] = Field(default=None, alias="fontWeight")


class Spacing(CommandInput):
    xs: Optional[str] = None
    sm: Optional[str] = None
    md: Optional[str] = None
    lg: Optional[str] = None
    xl: Optional[str] = None


class Scale(CommandInput):
    small: Optional[str] = None
    medium: Optional[str] = None
    large: Optional[str] = None


class ListThemesInput(SortedPageInput):
    type: Optional[ThemeType] = Field(default=None, description="Only themes of this type")
    is_system: Optional[bool] = Field(default=None, alias="isSystem", description="Filter on system themes")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Filter on active themes")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        if self.type:
            params["type"] = self.type
        if self.is_system is not None:
            params["isSystem"] = query_flag(self.is_system)
        if self.is_active is not None:
            params["isActive"] = query_flag(self.is_active)
        return params


class CreateThemeInput(CommandInput):
    name: str = Field(..., min_length=1, description="Theme name")
    description: Optional[str] = Field(default=None, description="Theme description")
    type: ThemeType = Field(..., description="Theme type")
    colors: Palette = Field(..., description="Color palette")
    typography: Optional[Typography] = Field(default=None, description="Font family, sizes and weights")
    spacing: Optional[Spacing] = Field(default=None, description="Spacing scale")
    border_radius: Optional[Scale] = Field(default=None, alias="borderRadius", description="Border radius scale")
    shadows: Optional[Scale] = Field(default=None, description="Shadow scale")


class UpdateThemeInput(CommandInput):
    id: str = Field(..., min_length=1, description="Theme ID")
    name: Optional[str] = Field(default=None, description="Theme name")
    description: Optional[str] = Field(default=None, description="Theme description")
    colors: Optional[PaletteChanges] = Field(default=None, description="Color palette")
    typography: Optional[Typography] = Field(default=None, description="Font family, sizes and weights")
    spacing: Optional[Spacing] = Field(default=None, description="Spacing scale")
    border_radius: Optional[Scale] = Field(default=None, alias="borderRadius", description="Border radius scale")
    shadows: Optional[Scale] = Field(default=None, description="Shadow scale")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Whether the theme is active")


class DuplicateThemeInput(CommandInput):
    id: str = Field(..., min_length=1, description="Theme ID")
    new_name: str = Field(..., min_length=1, alias="newName", description="Name for the copy")


class ApplyThemeInput(CommandInput):
    theme_id: str = Field(..., min_length=1, alias="themeId", description="Theme ID")
    scope: ThemeScope = Field(default="user", description="Where the theme applies")
    target_id: Optional[str] = Field(default=None, alias="targetId", description="User or project ID for the scope")


class CurrentThemeInput(CommandInput):
    scope: Optional[ThemeScope] = Field(default=None, description="Scope to look up")
    target_id: Optional[str] = Field(default=None, alias="targetId", description="User or project ID for the scope")


class PreviewThemeInput(CommandInput):
    theme_id: str = Field(..., min_length=1, alias="themeId", description="Theme ID")
    component: Optional[Literal["button", "card", "table", "form", "dashboard"]] = Field(
        default=None, description="Component to render"
    )


class ThemeData(CommandInput):
    colors: Palette
    typography: Optional[Typography] = None


class ValidateThemeInput(CommandInput):
    theme_data: ThemeData = Field(..., alias="themeData", description="Palette and typography to check")


class ExportThemeInput(CommandInput):
    id: str = Field(..., min_length=1, description="Theme ID")
    format: ThemeFormat = Field(..., description="Export format")


class ImportThemeInput(CommandInput):
    name: str = Field(..., min_length=1, description="Theme name")
    format: ThemeFormat = Field(..., description="Format of the data")
    data: str = Field(..., min_length=1, description="Theme source")
    overwrite: bool = Field(default=False, description="Replace a theme with the same name")


class ThemeTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_themes", "List themes with optional filtering and pagination", ListThemesInput, self.list_themes
            ),
            CommandDescriptor("iconect_get_theme", "Get a specific theme", IdInput, self.get_theme),
            CommandDescriptor("iconect_create_theme", "Create a new theme", CreateThemeInput, self.create_theme),
            CommandDescriptor("iconect_update_theme", "Update an existing theme", UpdateThemeInput, self.update_theme),
            CommandDescriptor("iconect_delete_theme", "Delete a theme", IdInput, self.delete_theme),
            CommandDescriptor(
                "iconect_duplicate_theme", "Duplicate a theme with new name", DuplicateThemeInput, self.duplicate_theme
            ),
            CommandDescriptor(
                "iconect_apply_theme", "Apply a theme to user, project, or globally", ApplyThemeInput, self.apply_theme
            ),
            CommandDescriptor(
                "iconect_get_current_theme",
                "Get currently applied theme for scope",
                CurrentThemeInput,
                self.get_current_theme,
            ),
            CommandDescriptor(
                "iconect_preview_theme", "Preview a theme on specific components", PreviewThemeInput, self.preview_theme
            ),
            CommandDescriptor(
                "iconect_validate_theme", "Validate theme data for compliance", ValidateThemeInput, self.validate_theme
            ),
            CommandDescriptor("iconect_export_theme", "Export theme in various formats", ExportThemeInput, self.export_theme),
            CommandDescriptor("iconect_import_theme", "Import theme from external source", ImportThemeInput, self.import_theme),
        ]

    async def list_themes(self, params: ListThemesInput) -> Dict[str, Any]:
        tool_logger.info("Listing themes")
        response = await self.client.get("/themes", params=params.to_query_params() or None)
        return success_envelope("Themes retrieved successfully", response)

    async def get_theme(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting theme: {params.id}")
        response = await self.client.get(f"/themes/{params.id}")
        return success_envelope("Theme retrieved successfully", response)

    async def create_theme(self, params: CreateThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating {params.type} theme: {params.name}")
        response = await self.client.post("/themes", json=request_body(params))
        return success_envelope("Theme created successfully", response)

    async def update_theme(self, params: UpdateThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating theme: {params.id}")
        response = await self.client.put(f"/themes/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Theme updated successfully", response)

    async def delete_theme(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting theme: {params.id}")
        await self.client.delete(f"/themes/{params.id}")
        return success_envelope("Theme deleted successfully", {"id": params.id})

    async def duplicate_theme(self, params: DuplicateThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Duplicating theme {params.id} as {params.new_name}")
        response = await self.client.post(f"/themes/{params.id}/duplicate", json={"newName": params.new_name})
        return success_envelope("Theme duplicated successfully", response)

    async def apply_theme(self, params: ApplyThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Applying theme {params.theme_id} at {params.scope} scope")
        await self.client.post(f"/themes/{params.theme_id}/apply", json=request_body(params, exclude={"theme_id"}))
        return success_envelope("Theme applied successfully", {"themeId": params.theme_id, "scope": params.scope})

    async def get_current_theme(self, params: CurrentThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting current theme (scope={params.scope or 'default'})")
        response = await self.client.get("/themes/current", params=request_body(params) or None)
        return success_envelope("Current theme retrieved successfully", response)

    async def preview_theme(self, params: PreviewThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Previewing theme: {params.theme_id}")
        response = await self.client.post(
            f"/themes/{params.theme_id}/preview", json=request_body(params, exclude={"theme_id"})
        )
        return success_envelope("Theme preview generated successfully", response)

    async def validate_theme(self, params: ValidateThemeInput) -> Dict[str, Any]:
        tool_logger.info("Validating theme data")
        response = await self.client.post("/themes/validate", json=request_body(params.theme_data))
        return success_envelope("Theme validation completed", response)

    async def export_theme(self, params: ExportThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Exporting theme {params.id} as {params.format}")
        response = await self.client.post(f"/themes/{params.id}/export", json={"format": params.format})
        return success_envelope("Theme exported successfully", response)

    async def import_theme(self, params: ImportThemeInput) -> Dict[str, Any]:
        tool_logger.info(f"Importing {params.format} theme: {params.name}")
        response = await self.client.post("/themes/import", json=request_body(params))
        return success_envelope("Theme imported successfully", response)
