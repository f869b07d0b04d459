#!/usr/bin/env python3
"""
Field Management Tools for Iconect MCP Server

Provides project field definitions: listing, CRUD, value validation,
usage statistics and duplication into another project.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, SortedPageInput, query_flag, request_body

tool_logger = get_tool_logger("fields")

FieldType = Literal["text", "number", "date", "boolean", "choice", "multiChoice", "file", "user", "lookup"]
DataType = Literal["string", "integer", "decimal", "datetime", "boolean"]


class FieldChoice(CommandInput):
    value: str
    label: str
    is_default: bool = Field(default=False, alias="isDefault")


class ListFieldsInput(SortedPageInput):
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    field_type: Optional[FieldType] = Field(default=None, alias="fieldType", description="Only fields of this type")
    is_required: Optional[bool] = Field(default=None, alias="isRequired", description="Filter on required fields")
    is_system_field: Optional[bool] = Field(default=None, alias="isSystemField", description="Filter on system fields")
    is_searchable: Optional[bool] = Field(default=None, alias="isSearchable", description="Filter on searchable fields")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params["projectId"] = self.project_id
        if self.field_type:
            params["fieldType"] = self.field_type
        if self.is_required is not None:
            params["isRequired"] = query_flag(self.is_required)
        if self.is_system_field is not None:
            params["isSystemField"] = query_flag(self.is_system_field)
        if self.is_searchable is not None:
            params["isSearchable"] = query_flag(self.is_searchable)
        return params


class CreateFieldInput(CommandInput):
    name: str = Field(..., min_length=1, description="Internal field name")
    display_name: str = Field(..., min_length=1, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="Field description")
    field_type: FieldType = Field(..., alias="fieldType", description="Field type")
    data_type: DataType = Field(..., alias="dataType", description="Storage data type")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    is_required: bool = Field(default=False, alias="isRequired", description="Whether a value is required")
    is_searchable: bool = Field(default=True, alias="isSearchable", description="Whether the field is searchable")
    max_length: Optional[int] = Field(default=None, gt=0, alias="maxLength", description="Maximum value length")
    default_value: Optional[Any] = Field(default=None, alias="defaultValue", description="Default value")
    choices: Optional[List[FieldChoice]] = Field(default=None, description="Choices for choice fields")
    validation_rules: Optional[Dict[str, Any]] = Field(default=None, alias="validationRules", description="Validation rules")


class UpdateFieldInput(CommandInput):
    id: str = Field(..., min_length=1, description="Field ID")
    display_name: Optional[str] = Field(default=None, alias="displayName", description="Display name")
    description: Optional[str] = Field(default=None, description="Field description")
    is_required: Optional[bool] = Field(default=None, alias="isRequired", description="Whether a value is required")
    is_searchable: Optional[bool] = Field(default=None, alias="isSearchable", description="Whether the field is searchable")
    max_length: Optional[int] = Field(default=None, gt=0, alias="maxLength", description="Maximum value length")
    default_value: Optional[Any] = Field(default=None, alias="defaultValue", description="Default value")
    choices: Optional[List[FieldChoice]] = Field(default=None, description="Choices for choice fields")
    validation_rules: Optional[Dict[str, Any]] = Field(default=None, alias="validationRules", description="Validation rules")


class DeleteFieldInput(CommandInput):
    id: str = Field(..., min_length=1, description="Field ID")
    force: bool = Field(default=False, description="Delete even if records hold values")


class ValidateFieldValueInput(CommandInput):
    field_id: str = Field(..., min_length=1, alias="fieldId", description="Field ID")
    value: Any = Field(default=None, description="Value to validate")


class FieldUsageInput(CommandInput):
    field_id: str = Field(..., min_length=1, alias="fieldId", description="Field ID")


class DuplicateFieldInput(CommandInput):
    source_field_id: str = Field(..., min_length=1, alias="sourceFieldId", description="Field to copy")
    target_project_id: str = Field(..., min_length=1, alias="targetProjectId", description="Project receiving the copy")
    new_name: Optional[str] = Field(default=None, alias="newName", description="Name for the copy")
    new_display_name: Optional[str] = Field(default=None, alias="newDisplayName", description="Display name for the copy")


class FieldTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_fields", "List project fields with optional filtering", ListFieldsInput, self.list_fields
            ),
            CommandDescriptor("iconect_get_field", "Get a specific field by ID", IdInput, self.get_field),
            CommandDescriptor("iconect_create_field", "Create a new custom field", CreateFieldInput, self.create_field),
            CommandDescriptor(
                "iconect_update_field",
                "Update an existing field (limited updates for system fields)",
                UpdateFieldInput,
                self.update_field,
            ),
            CommandDescriptor(
                "iconect_delete_field",
                "Delete a custom field (system fields cannot be deleted)",
                DeleteFieldInput,
                self.delete_field,
            ),
            CommandDescriptor(
                "iconect_validate_field_value",
                "Validate a value against field constraints",
                ValidateFieldValueInput,
                self.validate_field_value,
            ),
            CommandDescriptor(
                "iconect_get_field_usage", "Get usage statistics for a field", FieldUsageInput, self.get_field_usage
            ),
            CommandDescriptor(
                "iconect_duplicate_field", "Duplicate a field to another project", DuplicateFieldInput, self.duplicate_field
            ),
        ]

    async def list_fields(self, params: ListFieldsInput) -> Dict[str, Any]:
        tool_logger.info(f"Listing fields in project: {params.project_id}")
        response = await self.client.get("/fields", params=params.to_query_params())
        return success_envelope("Fields retrieved successfully", response)

    async def get_field(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting field: {params.id}")
        response = await self.client.get(f"/fields/{params.id}")
        return success_envelope("Field retrieved successfully", response)

    async def create_field(self, params: CreateFieldInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating {params.field_type} field {params.name} in project {params.project_id}")
        response = await self.client.post("/fields", json=request_body(params))
        return success_envelope("Field created successfully", response)

    async def update_field(self, params: UpdateFieldInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating field: {params.id}")
        response = await self.client.put(f"/fields/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Field updated successfully", response)

    async def delete_field(self, params: DeleteFieldInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting field: {params.id} (force={params.force})")
        await self.client.delete(f"/fields/{params.id}", params={"force": "true"} if params.force else None)
        return success_envelope("Field deleted successfully", {"id": params.id, "force": params.force})

    async def validate_field_value(self, params: ValidateFieldValueInput) -> Dict[str, Any]:
        tool_logger.info(f"Validating value for field: {params.field_id}")
        response = await self.client.post(f"/fields/{params.field_id}/validate", json={"value": params.value})
        return success_envelope("Field value validation completed", response)

    async def get_field_usage(self, params: FieldUsageInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting usage for field: {params.field_id}")
        response = await self.client.get(f"/fields/{params.field_id}/usage")
        return success_envelope("Field usage statistics retrieved successfully", response)

    async def duplicate_field(self, params: DuplicateFieldInput) -> Dict[str, Any]:
        tool_logger.info(f"Duplicating field {params.source_field_id} into project {params.target_project_id}")
        response = await self.client.post("/fields/duplicate", json=request_body(params))
        return success_envelope("Field duplicated successfully", response)
