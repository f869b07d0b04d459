#!/usr/bin/env python3
"""
Record Management Tools for Iconect MCP Server

Provides record operations: search, get, create, update, delete, links
between records and bulk updates with status polling.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import flatten_filter, request_body

tool_logger = get_tool_logger("records")

RecordStatus = Literal["active", "deleted", "archived", "processing"]
RecordPriority = Literal["low", "normal", "high", "critical"]
ReviewStatus = Literal["pending", "in_review", "approved", "rejected"]
RelationshipType = Literal["parent", "child", "related", "duplicate", "reference"]


class DateRange(CommandInput):
    field: str = Field(..., min_length=1, description="Date field to filter on")
    from_: Optional[str] = Field(default=None, alias="from", description="Start of range (ISO-8601)")
    to: Optional[str] = Field(default=None, description="End of range (ISO-8601)")


class SearchRecordsInput(CommandInput):
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID to search in")
    query: Optional[str] = Field(default=None, description="Full-text search query")
    fields: Optional[List[str]] = Field(default=None, description="Fields to return")
    filters: Optional[Dict[str, Any]] = Field(default=None, description="Field filters as key-value pairs")
    date_range: Optional[DateRange] = Field(default=None, alias="dateRange", description="Date range filter")
    tags: Optional[List[str]] = Field(default=None, description="Only records with these tags")
    status: Optional[List[RecordStatus]] = Field(default=None, description="Only records in these states")
    assigned_to: Optional[List[str]] = Field(default=None, alias="assignedTo", description="Only records assigned to these users")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Only records in this folder")
    page: Optional[int] = Field(default=None, ge=1, description="Page number (default: 1)")
    page_size: Optional[int] = Field(default=None, ge=1, le=1000, alias="pageSize", description="Items per page (max: 1000)")
    sort_by: Optional[str] = Field(default=None, alias="sortBy", description="Field to sort by")
    sort_order: Optional[Literal["asc", "desc"]] = Field(default=None, alias="sortOrder", description="Sort order")

    def to_query_params(self) -> List[tuple]:
        # List form: tags/status/assignedTo repeat the key once per value.
        params: List[tuple] = [("projectId", self.project_id)]
        if self.query:
            params.append(("query", self.query))
        for name in self.fields or []:
            params.append(("fields", name))
        if self.folder_id:
            params.append(("folderId", self.folder_id))
        if self.page is not None:
            params.append(("page", self.page))
        if self.page_size is not None:
            params.append(("pageSize", self.page_size))
        if self.sort_by:
            params.append(("sortBy", self.sort_by))
        if self.sort_order:
            params.append(("sortOrder", self.sort_order))
        params.extend(flatten_filter(self.filters).items())
        for tag in self.tags or []:
            params.append(("tags", tag))
        for status in self.status or []:
            params.append(("status", status))
        for user in self.assigned_to or []:
            params.append(("assignedTo", user))
        if self.date_range:
            params.append(("dateRange.field", self.date_range.field))
            if self.date_range.from_:
                params.append(("dateRange.from", self.date_range.from_))
            if self.date_range.to:
                params.append(("dateRange.to", self.date_range.to))
        return params


class GetRecordInput(CommandInput):
    id: str = Field(..., min_length=1, description="Record ID")
    include_files: bool = Field(default=False, alias="includeFiles", description="Include attached files")
    include_relationships: bool = Field(
        default=False, alias="includeRelationships", description="Include record relationships"
    )


class CreateRecordInput(CommandInput):
    document_id: str = Field(..., min_length=1, alias="documentId", description="Document ID")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Folder ID")
    fields: Dict[str, Any] = Field(..., description="Field values as key-value pairs")
    file_ids: Optional[List[str]] = Field(default=None, alias="fileIds", description="Attached file IDs")
    tags: Optional[List[str]] = Field(default=None, description="Tags")
    priority: RecordPriority = Field(default="normal", description="Priority (default: normal)")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo", description="Assignee user ID")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class UpdateRecordInput(CommandInput):
    id: str = Field(..., min_length=1, description="Record ID")
    fields: Optional[Dict[str, Any]] = Field(default=None, description="Field values to change")
    file_ids: Optional[List[str]] = Field(default=None, alias="fileIds", description="Attached file IDs")
    tags: Optional[List[str]] = Field(default=None, description="Tags")
    priority: Optional[RecordPriority] = Field(default=None, description="Priority")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo", description="Assignee user ID")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Folder ID")
    review_status: Optional[ReviewStatus] = Field(default=None, alias="reviewStatus", description="Review status")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class DeleteRecordInput(CommandInput):
    id: str = Field(..., min_length=1, description="Record ID")
    permanent: bool = Field(default=False, description="Permanently delete instead of soft delete")


class BulkUpdateRecordsInput(CommandInput):
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    action: Literal["update", "delete", "move", "tag", "assign"] = Field(..., description="Bulk action to apply")
    record_ids: List[str] = Field(..., min_length=1, alias="recordIds", description="Record IDs to act on")
    parameters: Optional[Dict[str, Any]] = Field(default=None, description="Action parameters")


class BulkOperationStatusInput(CommandInput):
    operation_id: str = Field(..., min_length=1, alias="operationId", description="Bulk operation ID")


class CreateRelationshipInput(CommandInput):
    source_record_id: str = Field(..., min_length=1, alias="sourceRecordId", description="Source record ID")
    target_record_id: str = Field(..., min_length=1, alias="targetRecordId", description="Target record ID")
    relationship_type: RelationshipType = Field(..., alias="relationshipType", description="Type of relationship")
    description: Optional[str] = Field(default=None, description="Optional description of the relationship")


class GetRelationshipsInput(CommandInput):
    record_id: str = Field(..., min_length=1, alias="recordId", description="Record ID")
    relationship_type: Optional[RelationshipType] = Field(
        default=None, alias="relationshipType", description="Only relationships of this type"
    )


class DeleteRelationshipInput(CommandInput):
    id: str = Field(..., min_length=1, description="Relationship ID")


class RecordTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_search_records",
                "Search records in a project with full-text query, filters, tags and date ranges",
                SearchRecordsInput,
                self.search_records,
            ),
            CommandDescriptor("iconect_get_record", "Get a specific record by ID", GetRecordInput, self.get_record),
            CommandDescriptor("iconect_create_record", "Create a new record", CreateRecordInput, self.create_record),
            CommandDescriptor("iconect_update_record", "Update an existing record", UpdateRecordInput, self.update_record),
            CommandDescriptor(
                "iconect_delete_record", "Delete a record (soft delete unless permanent)", DeleteRecordInput, self.delete_record
            ),
            CommandDescriptor(
                "iconect_bulk_update_records",
                "Apply an update, delete, move, tag or assign action to many records",
                BulkUpdateRecordsInput,
                self.bulk_update_records,
            ),
            CommandDescriptor(
                "iconect_create_record_relationship",
                "Create a relationship between two records",
                CreateRelationshipInput,
                self.create_record_relationship,
            ),
            CommandDescriptor(
                "iconect_get_record_relationships",
                "Get relationships for a specific record",
                GetRelationshipsInput,
                self.get_record_relationships,
            ),
            CommandDescriptor(
                "iconect_delete_record_relationship",
                "Delete a record relationship",
                DeleteRelationshipInput,
                self.delete_record_relationship,
            ),
            CommandDescriptor(
                "iconect_get_bulk_operation_status",
                "Get the status of a bulk record operation",
                BulkOperationStatusInput,
                self.get_bulk_operation_status,
            ),
        ]

    async def search_records(self, params: SearchRecordsInput) -> Dict[str, Any]:
        tool_logger.info(f"Searching records in project: {params.project_id}")
        response = await self.client.get("/records/search", params=params.to_query_params())
        return success_envelope("Records search completed successfully", response)

    async def get_record(self, params: GetRecordInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting record: {params.id}")
        query = {}
        if params.include_files:
            query["includeFiles"] = "true"
        if params.include_relationships:
            query["includeRelationships"] = "true"
        response = await self.client.get(f"/records/{params.id}", params=query or None)
        return success_envelope("Record retrieved successfully", response)

    async def create_record(self, params: CreateRecordInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating record for document {params.document_id} in project {params.project_id}")
        response = await self.client.post("/records", json=request_body(params))
        return success_envelope("Record created successfully", response)

    async def update_record(self, params: UpdateRecordInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating record: {params.id}")
        response = await self.client.put(f"/records/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Record updated successfully", response)

    async def delete_record(self, params: DeleteRecordInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting record: {params.id} (permanent={params.permanent})")
        query = {"permanent": "true"} if params.permanent else None
        await self.client.delete(f"/records/{params.id}", params=query)
        message = "Record permanently deleted" if params.permanent else "Record deleted (soft delete)"
        return success_envelope(message, {"id": params.id, "permanent": params.permanent})

    async def bulk_update_records(self, params: BulkUpdateRecordsInput) -> Dict[str, Any]:
        tool_logger.info(f"Bulk {params.action} on {len(params.record_ids)} records in project {params.project_id}")
        response = await self.client.post("/records/bulk", json=request_body(params))
        return success_envelope("Bulk operation started successfully", response)

    async def create_record_relationship(self, params: CreateRelationshipInput) -> Dict[str, Any]:
        tool_logger.info(
            f"Linking record {params.source_record_id} to {params.target_record_id} as {params.relationship_type}"
        )
        response = await self.client.post("/records/relationships", json=request_body(params))
        return success_envelope("Record relationship created successfully", response)

    async def get_record_relationships(self, params: GetRelationshipsInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting relationships for record: {params.record_id}")
        query = {"type": params.relationship_type} if params.relationship_type else None
        response = await self.client.get(f"/records/{params.record_id}/relationships", params=query)
        return success_envelope("Record relationships retrieved successfully", response)

    async def delete_record_relationship(self, params: DeleteRelationshipInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting record relationship: {params.id}")
        await self.client.delete(f"/records/relationships/{params.id}")
        return success_envelope("Record relationship deleted successfully", {"id": params.id})

    async def get_bulk_operation_status(self, params: BulkOperationStatusInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting bulk operation status: {params.operation_id}")
        response = await self.client.get(f"/records/bulk/{params.operation_id}")
        return success_envelope("Bulk operation status retrieved successfully", response)
