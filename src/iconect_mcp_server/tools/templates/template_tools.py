#!/usr/bin/env python3
"""
Template Management Tools for Iconect MCP Server

Provides document, email, report and form templates: CRUD, duplication,
rendering with variables, validation and variable discovery.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, SortedPageInput, query_flag, request_body

tool_logger = get_tool_logger("templates")

TemplateType = Literal["document", "email", "report", "form", "workflow", "notification"]
ContentFormat = Literal["html", "markdown", "text", "json", "xml"]
OutputFormat = Literal["pdf", "html", "docx", "txt", "email"]


class TemplateVariable(CommandInput):
    name: str
    type: Literal["string", "number", "date", "boolean", "list", "object"]
    required: bool = False
    default_value: Optional[Any] = Field(default=None, alias="defaultValue")
    description: Optional[str] = None


class TemplateContent(CommandInput):
    format: ContentFormat = Field(..., description="Content format")
    template: str = Field(..., min_length=1, description="Template body")
    variables: Optional[List[TemplateVariable]] = Field(default=None, description="Declared variables")
    styles: Optional[str] = None
    scripts: Optional[str] = None


class TemplateContentChanges(TemplateContent):
    format: Optional[ContentFormat] = Field(default=None, description="Content format")
    template: Optional[str] = Field(default=None, description="Template body")


class Margins(CommandInput):
    top: float
    right: float
    bottom: float
    left: float


class TemplateSettings(CommandInput):
    output_format: Optional[OutputFormat] = Field(default=None, alias="outputFormat")
    paper_size: Optional[Literal["a4", "a3", "letter", "legal", "custom"]] = Field(default=None, alias="paperSize")
    orientation: Optional[Literal["portrait", "landscape"]] = None
    margins: Optional[Margins] = None
    headers: Optional[bool] = None
    footers: Optional[bool] = None
    watermark: Optional[str] = None


class TemplateValidation(CommandInput):
    required: Optional[List[str]] = None
    schema_: Optional[Dict[str, Any]] = Field(default=None, alias="schema")


class ListTemplatesInput(SortedPageInput):
    type: Optional[TemplateType] = Field(default=None, description="Only templates of this type")
    category: Optional[str] = Field(default=None, description="Only templates in this category")
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only templates in this project")
    is_system: Optional[bool] = Field(default=None, alias="isSystem", description="Filter on system templates")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Filter on active templates")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params.update(request_body(self, include={"type", "category", "project_id"}))
        if self.is_system is not None:
            params["isSystem"] = query_flag(self.is_system)
        if self.is_active is not None:
            params["isActive"] = query_flag(self.is_active)
        return params


class GetTemplateInput(CommandInput):
    id: str = Field(..., min_length=1, description="Template ID")
    include_content: bool = Field(default=True, alias="includeContent", description="Include the template body")


class CreateTemplateInput(CommandInput):
    name: str = Field(..., min_length=1, description="Template name")
    display_name: str = Field(..., min_length=1, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="Template description")
    type: TemplateType = Field(..., description="Template type")
    category: Optional[str] = Field(default=None, description="Category")
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Project ID (omit for a global template)")
    content: TemplateContent = Field(..., description="Template body and variables")
    settings: Optional[TemplateSettings] = Field(default=None, description="Output settings")
    validation: Optional[TemplateValidation] = Field(default=None, description="Variable validation")


class UpdateTemplateInput(CommandInput):
    id: str = Field(..., min_length=1, description="Template ID")
    name: Optional[str] = Field(default=None, description="Template name")
    display_name: Optional[str] = Field(default=None, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="Template description")
    category: Optional[str] = Field(default=None, description="Category")
    content: Optional[TemplateContentChanges] = Field(default=None, description="Template body and variables")
    settings: Optional[TemplateSettings] = Field(default=None, description="Output settings")
    validation: Optional[TemplateValidation] = Field(default=None, description="Variable validation")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Whether the template is active")


class DuplicateTemplateInput(CommandInput):
    id: str = Field(..., min_length=1, description="Template ID")
    new_name: str = Field(..., min_length=1, alias="newName", description="Name for the copy")
    new_display_name: Optional[str] = Field(default=None, alias="newDisplayName", description="Display name for the copy")
    target_project_id: Optional[str] = Field(default=None, alias="targetProjectId", description="Project receiving the copy")


class ValidateTemplateInput(CommandInput):
    id: str = Field(..., min_length=1, description="Template ID")
    variables: Dict[str, Any] = Field(default_factory=dict, description="Variable values")


class RenderTemplateInput(ValidateTemplateInput):
    output_format: Optional[OutputFormat] = Field(default=None, alias="outputFormat", description="Output format")


class TemplateTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_templates",
                "List templates with optional filtering and pagination",
                ListTemplatesInput,
                self.list_templates,
            ),
            CommandDescriptor(
                "iconect_get_template", "Get a specific template with optional content", GetTemplateInput, self.get_template
            ),
            CommandDescriptor("iconect_create_template", "Create a new template", CreateTemplateInput, self.create_template),
            CommandDescriptor("iconect_update_template", "Update an existing template", UpdateTemplateInput, self.update_template),
            CommandDescriptor("iconect_delete_template", "Delete a template", IdInput, self.delete_template),
            CommandDescriptor(
                "iconect_duplicate_template",
                "Duplicate a template with new configuration",
                DuplicateTemplateInput,
                self.duplicate_template,
            ),
            CommandDescriptor(
                "iconect_render_template", "Render a template with provided variables", RenderTemplateInput, self.render_template
            ),
            CommandDescriptor(
                "iconect_validate_template",
                "Validate template with provided variables",
                ValidateTemplateInput,
                self.validate_template,
            ),
            CommandDescriptor(
                "iconect_get_template_variables",
                "Get required and optional variables for a template",
                IdInput,
                self.get_template_variables,
            ),
        ]

    async def list_templates(self, params: ListTemplatesInput) -> Dict[str, Any]:
        tool_logger.info("Listing templates")
        response = await self.client.get("/templates", params=params.to_query_params() or None)
        return success_envelope("Templates retrieved successfully", response)

    async def get_template(self, params: GetTemplateInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting template: {params.id}")
        query = None if params.include_content else {"includeContent": "false"}
        response = await self.client.get(f"/templates/{params.id}", params=query)
        return success_envelope("Template retrieved successfully", response)

    async def create_template(self, params: CreateTemplateInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating {params.type} template {params.name}")
        response = await self.client.post("/templates", json=request_body(params))
        return success_envelope("Template created successfully", response)

    async def update_template(self, params: UpdateTemplateInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating template: {params.id}")
        response = await self.client.put(f"/templates/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Template updated successfully", response)

    async def delete_template(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting template: {params.id}")
        await self.client.delete(f"/templates/{params.id}")
        return success_envelope("Template deleted successfully", {"id": params.id})

    async def duplicate_template(self, params: DuplicateTemplateInput) -> Dict[str, Any]:
        tool_logger.info(f"Duplicating template {params.id} as {params.new_name}")
        response = await self.client.post(f"/templates/{params.id}/duplicate", json=request_body(params, exclude={"id"}))
        return success_envelope("Template duplicated successfully", response)

    async def render_template(self, params: RenderTemplateInput) -> Dict[str, Any]:
        tool_logger.info(f"Rendering template: {params.id}")
        response = await self.client.post(f"/templates/{params.id}/render", json=request_body(params, exclude={"id"}))
        return success_envelope("Template rendered successfully", response)

    async def validate_template(self, params: ValidateTemplateInput) -> Dict[str, Any]:
        tool_logger.info(f"Validating template: {params.id}")
        response = await self.client.post(f"/templates/{params.id}/validate", json={"variables": params.variables})
        return success_envelope("Template validation completed", response)

    async def get_template_variables(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting variables for template: {params.id}")
        response = await self.client.get(f"/templates/{params.id}/variables")
        return success_envelope("Template variables retrieved successfully", response)
