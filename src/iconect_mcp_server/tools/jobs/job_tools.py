#!/usr/bin/env python3
"""
Job Management Tools for Iconect MCP Server

Provides background job operations:
- Jobs: list, get, create (import, delete, custom, from template), update,
  control (start/pause/resume/cancel/restart), delete and logs
- Job queues: list, get, create, update, delete
- Job templates: list, get
- Job schedules: list, create, update, delete
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, PageInput, SortedPageInput, query_flag, request_body

tool_logger = get_tool_logger("jobs")

JobType = Literal["import", "export", "delete", "move", "transform", "backup", "sync", "custom"]
JobStatus = Literal["pending", "queued", "running", "paused", "completed", "failed", "cancelled"]
JobPriority = Literal["low", "normal", "high", "critical"]
QueuePriority = Literal["low", "normal", "high"]
ProcessingOrder = Literal["fifo", "lifo", "priority", "scheduled"]


# Jobs

class JobDateRange(CommandInput):
    field: Literal["createdDate", "scheduledStart", "actualStart", "actualEnd"] = Field(..., description="Date field")
    from_: Optional[str] = Field(default=None, alias="from", description="Start of range (ISO-8601)")
    to: Optional[str] = Field(default=None, description="End of range (ISO-8601)")


class ListJobsInput(SortedPageInput):
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only jobs in this project")
    type: Optional[JobType] = Field(default=None, description="Only jobs of this type")
    status: Optional[JobStatus] = Field(default=None, description="Only jobs in this state")
    priority: Optional[JobPriority] = Field(default=None, description="Only jobs with this priority")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo", description="Only jobs assigned to this user")
    created_by: Optional[str] = Field(default=None, alias="createdBy", description="Only jobs created by this user")
    date_range: Optional[JobDateRange] = Field(default=None, alias="dateRange", description="Date range filter")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params.update(request_body(self, include={"project_id", "type", "status", "priority", "assigned_to", "created_by"}))
        if self.date_range:
            params["dateRange.field"] = self.date_range.field
            if self.date_range.from_:
                params["dateRange.from"] = self.date_range.from_
            if self.date_range.to:
                params["dateRange.to"] = self.date_range.to
        return params


class GetJobInput(CommandInput):
    id: str = Field(..., min_length=1, description="Job ID")
    include_progress: bool = Field(default=True, alias="includeProgress", description="Include progress details")
    include_results: bool = Field(default=True, alias="includeResults", description="Include job results")
    include_logs: bool = Field(default=False, alias="includeLogs", description="Include recent log entries")


class ImportSource(CommandInput):
    type: Literal["file", "database", "api", "folder"] = Field(..., description="Source kind")
    location: str = Field(..., description="Source location (path, URL or connection string)")
    credentials: Optional[Dict[str, Any]] = Field(default=None, description="Source credentials")
    format: Optional[Literal["csv", "xlsx", "json", "xml", "pdf", "tiff", "msg", "eml"]] = Field(
        default=None, description="Source format"
    )
    encoding: str = Field(default="utf-8", description="Source encoding")


class FieldMapping(CommandInput):
    source_field: str = Field(..., alias="sourceField")
    target_field: str = Field(..., alias="targetField")
    transformation: Optional[str] = None
    default_value: Optional[Any] = Field(default=None, alias="defaultValue")


class ImportMapping(CommandInput):
    field_mappings: List[FieldMapping] = Field(..., alias="fieldMappings", description="Source to target field mappings")
    folder_mapping: Optional[str] = Field(default=None, alias="folderMapping", description="Target folder mapping")
    file_store_id: str = Field(..., alias="fileStoreId", description="File store receiving imported files")


class ImportOptions(CommandInput):
    skip_duplicates: bool = Field(default=True, alias="skipDuplicates")
    validate_data: bool = Field(default=True, alias="validateData")
    create_missing_fields: bool = Field(default=False, alias="createMissingFields")
    batch_size: int = Field(default=100, ge=1, le=1000, alias="batchSize")
    continue_on_error: bool = Field(default=True, alias="continueOnError")
    generate_report: bool = Field(default=True, alias="generateReport")


class ImportJobConfiguration(CommandInput):
    source: ImportSource
    mapping: ImportMapping
    options: ImportOptions = Field(default_factory=ImportOptions)


class SearchCriteria(CommandInput):
    query: Optional[str] = None
    filters: Optional[Dict[str, Any]] = None
    date_range: Optional[Dict[str, Any]] = Field(default=None, alias="dateRange")
    folder_id: Optional[str] = Field(default=None, alias="folderId")


class DeleteCriteria(CommandInput):
    record_ids: Optional[List[str]] = Field(default=None, alias="recordIds", description="Records to delete")
    search_criteria: Optional[SearchCriteria] = Field(
        default=None, alias="searchCriteria", description="Search selecting the records to delete"
    )


class DeleteOptions(CommandInput):
    permanent_delete: bool = Field(default=False, alias="permanentDelete")
    delete_files: bool = Field(default=False, alias="deleteFiles")
    move_to_folder: Optional[str] = Field(default=None, alias="moveToFolder")
    batch_size: int = Field(default=100, ge=1, le=1000, alias="batchSize")
    generate_report: bool = Field(default=True, alias="generateReport")
    require_confirmation: bool = Field(default=True, alias="requireConfirmation")


class DeleteJobConfiguration(CommandInput):
    criteria: DeleteCriteria
    options: DeleteOptions = Field(default_factory=DeleteOptions)


class NewJobInput(CommandInput):
    name: str = Field(..., min_length=1, description="Job name")
    description: Optional[str] = Field(default=None, description="Job description")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    priority: JobPriority = Field(default="normal", description="Priority (default: normal)")
    scheduled_start: Optional[str] = Field(default=None, alias="scheduledStart", description="Scheduled start (ISO-8601)")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo", description="Assignee user ID")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class CreateImportJobInput(NewJobInput):
    configuration: ImportJobConfiguration = Field(..., description="Import source, field mapping and options")


class CreateDeleteJobInput(NewJobInput):
    configuration: DeleteJobConfiguration = Field(..., description="Delete criteria and options")


class CreateCustomJobInput(NewJobInput):
    type: Literal["export", "move", "transform", "backup", "sync", "custom"] = Field(..., description="Job type")
    configuration: Dict[str, Any] = Field(..., description="Job configuration")


class UpdateJobInput(CommandInput):
    id: str = Field(..., min_length=1, description="Job ID")
    name: Optional[str] = Field(default=None, description="Job name")
    description: Optional[str] = Field(default=None, description="Job description")
    priority: Optional[JobPriority] = Field(default=None, description="Priority")
    scheduled_start: Optional[str] = Field(default=None, alias="scheduledStart", description="Scheduled start (ISO-8601)")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo", description="Assignee user ID")
    configuration: Optional[Dict[str, Any]] = Field(default=None, description="Job configuration")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class ControlJobInput(CommandInput):
    id: str = Field(..., min_length=1, description="Job ID")
    action: Literal["start", "pause", "resume", "cancel", "restart"] = Field(..., description="Control action")
    reason: Optional[str] = Field(default=None, description="Reason recorded with the action")


class JobLogsInput(CommandInput):
    id: str = Field(..., min_length=1, description="Job ID")
    level: Optional[Literal["debug", "info", "warn", "error"]] = Field(default=None, description="Minimum log level")
    start_time: Optional[str] = Field(default=None, alias="startTime", description="Entries after this time (ISO-8601)")
    end_time: Optional[str] = Field(default=None, alias="endTime", description="Entries before this time (ISO-8601)")
    page: Optional[int] = Field(default=None, ge=1, description="Page number (default: 1)")
    page_size: Optional[int] = Field(default=None, ge=1, le=1000, alias="pageSize", description="Entries per page (max: 1000)")


# Queues, templates, schedules

class ActiveFilterInput(PageInput):
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only entries in this project")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Filter on active state")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        if self.project_id:
            params["projectId"] = self.project_id
        if self.is_active is not None:
            params["isActive"] = query_flag(self.is_active)
        return params


class RetryPolicy(CommandInput):
    max_retries: int = Field(default=3, ge=0, alias="maxRetries")
    retry_delay: int = Field(default=5000, ge=0, alias="retryDelay", description="Delay in milliseconds")
    backoff_multiplier: float = Field(default=2, ge=1, alias="backoffMultiplier")


class CreateJobQueueInput(CommandInput):
    name: str = Field(..., min_length=1, description="Queue name")
    description: Optional[str] = Field(default=None, description="Queue description")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    max_concurrent_jobs: int = Field(default=1, ge=1, alias="maxConcurrentJobs", description="Jobs run in parallel")
    priority: QueuePriority = Field(default="normal", description="Queue priority")
    processing_order: ProcessingOrder = Field(default="fifo", alias="processingOrder", description="Processing order")
    retry_policy: Optional[RetryPolicy] = Field(default=None, alias="retryPolicy", description="Retry policy")


class UpdateJobQueueInput(CommandInput):
    id: str = Field(..., min_length=1, description="Queue ID")
    name: Optional[str] = Field(default=None, description="Queue name")
    description: Optional[str] = Field(default=None, description="Queue description")
    max_concurrent_jobs: Optional[int] = Field(default=None, ge=1, alias="maxConcurrentJobs", description="Jobs run in parallel")
    priority: Optional[QueuePriority] = Field(default=None, description="Queue priority")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Whether the queue accepts jobs")
    processing_order: Optional[ProcessingOrder] = Field(default=None, alias="processingOrder", description="Processing order")
    retry_policy: Optional[RetryPolicy] = Field(default=None, alias="retryPolicy", description="Retry policy")


class ListJobTemplatesInput(PageInput):
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only templates in this project")
    type: Optional[JobType] = Field(default=None, description="Only templates of this job type")
    is_system: Optional[bool] = Field(default=None, alias="isSystem", description="Filter on system templates")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        if self.project_id:
            params["projectId"] = self.project_id
        if self.type:
            params["type"] = self.type
        if self.is_system is not None:
            params["isSystem"] = query_flag(self.is_system)
        return params


class CreateJobFromTemplateInput(CommandInput):
    template_id: str = Field(..., min_length=1, alias="templateId", description="Template ID")
    name: str = Field(..., min_length=1, description="Job name")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    parameters: Dict[str, Any] = Field(..., description="Template parameters")
    priority: JobPriority = Field(default="normal", description="Priority (default: normal)")
    scheduled_start: Optional[str] = Field(default=None, alias="scheduledStart", description="Scheduled start (ISO-8601)")
    assigned_to: Optional[str] = Field(default=None, alias="assignedTo", description="Assignee user ID")


class CreateJobScheduleInput(CommandInput):
    name: str = Field(..., min_length=1, description="Schedule name")
    description: Optional[str] = Field(default=None, description="Schedule description")
    job_template_id: Optional[str] = Field(default=None, alias="jobTemplateId", description="Template the schedule runs")
    cron_expression: str = Field(..., min_length=1, alias="cronExpression", description="Cron expression")
    timezone: str = Field(default="UTC", description="Timezone for the cron expression")
    configuration: Dict[str, Any] = Field(..., description="Job configuration")
    is_active: bool = Field(default=True, alias="isActive", description="Whether the schedule is active")


class UpdateJobScheduleInput(CommandInput):
    id: str = Field(..., min_length=1, description="Schedule ID")
    name: Optional[str] = Field(default=None, description="Schedule name")
    description: Optional[str] = Field(default=None, description="Schedule description")
    cron_expression: Optional[str] = Field(default=None, alias="cronExpression", description="Cron expression")
    timezone: Optional[str] = Field(default=None, description="Timezone for the cron expression")
    configuration: Optional[Dict[str, Any]] = Field(default=None, description="Job configuration")
    is_active: Optional[bool] = Field(default=None, alias="isActive", description="Whether the schedule is active")


class JobTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor("iconect_list_jobs", "List jobs with optional filtering and pagination", ListJobsInput, self.list_jobs),
            CommandDescriptor("iconect_get_job", "Get detailed information about a specific job", GetJobInput, self.get_job),
            CommandDescriptor("iconect_create_import_job", "Create a new import job", CreateImportJobInput, self.create_import_job),
            CommandDescriptor("iconect_create_delete_job", "Create a new delete job", CreateDeleteJobInput, self.create_delete_job),
            CommandDescriptor(
                "iconect_create_custom_job",
                "Create a custom job with flexible configuration",
                CreateCustomJobInput,
                self.create_custom_job,
            ),
            CommandDescriptor("iconect_update_job", "Update an existing job (only if not running)", UpdateJobInput, self.update_job),
            CommandDescriptor(
                "iconect_control_job",
                "Control job execution (start, pause, resume, cancel, restart)",
                ControlJobInput,
                self.control_job,
            ),
            CommandDescriptor("iconect_delete_job", "Delete a job (only if not running)", IdInput, self.delete_job),
            CommandDescriptor("iconect_get_job_logs", "Get job execution logs", JobLogsInput, self.get_job_logs),
            CommandDescriptor(
                "iconect_list_job_queues", "List job queues with optional filtering", ActiveFilterInput, self.list_job_queues
            ),
            CommandDescriptor("iconect_get_job_queue", "Get detailed information about a job queue", IdInput, self.get_job_queue),
            CommandDescriptor("iconect_create_job_queue", "Create a new job queue", CreateJobQueueInput, self.create_job_queue),
            CommandDescriptor("iconect_update_job_queue", "Update an existing job queue", UpdateJobQueueInput, self.update_job_queue),
            CommandDescriptor("iconect_delete_job_queue", "Delete a job queue (only if empty)", IdInput, self.delete_job_queue),
            CommandDescriptor(
                "iconect_list_job_templates", "List available job templates", ListJobTemplatesInput, self.list_job_templates
            ),
            CommandDescriptor(
                "iconect_get_job_template", "Get detailed information about a job template", IdInput, self.get_job_template
            ),
            CommandDescriptor(
                "iconect_create_job_from_template",
                "Create a new job from a template",
                CreateJobFromTemplateInput,
                self.create_job_from_template,
            ),
            CommandDescriptor("iconect_list_job_schedules", "List job schedules", ActiveFilterInput, self.list_job_schedules),
            CommandDescriptor(
                "iconect_create_job_schedule", "Create a new job schedule", CreateJobScheduleInput, self.create_job_schedule
            ),
            CommandDescriptor(
                "iconect_update_job_schedule", "Update an existing job schedule", UpdateJobScheduleInput, self.update_job_schedule
            ),
            CommandDescriptor("iconect_delete_job_schedule", "Delete a job schedule", IdInput, self.delete_job_schedule),
        ]

    # Jobs

    async def list_jobs(self, params: ListJobsInput) -> Dict[str, Any]:
        tool_logger.info("Listing jobs")
        response = await self.client.get("/jobs", params=params.to_query_params())
        return success_envelope("Jobs retrieved successfully", response)

    async def get_job(self, params: GetJobInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting job: {params.id}")
        query = {}
        if params.include_progress:
            query["includeProgress"] = "true"
        if params.include_results:
            query["includeResults"] = "true"
        if params.include_logs:
            query["includeLogs"] = "true"
        response = await self.client.get(f"/jobs/{params.id}", params=query or None)
        return success_envelope("Job retrieved successfully", response)

    async def create_import_job(self, params: CreateImportJobInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating import job {params.name} in project {params.project_id}")
        response = await self.client.post("/jobs/import", json=request_body(params))
        return success_envelope("Import job created successfully", response)

    async def create_delete_job(self, params: CreateDeleteJobInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating delete job {params.name} in project {params.project_id}")
        response = await self.client.post("/jobs/delete", json=request_body(params))
        return success_envelope("Delete job created successfully", response)

    async def create_custom_job(self, params: CreateCustomJobInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating {params.type} job {params.name} in project {params.project_id}")
        response = await self.client.post("/jobs/custom", json=request_body(params))
        return success_envelope("Custom job created successfully", response)

    async def update_job(self, params: UpdateJobInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating job: {params.id}")
        response = await self.client.put(f"/jobs/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Job updated successfully", response)

    async def control_job(self, params: ControlJobInput) -> Dict[str, Any]:
        tool_logger.info(f"Job {params.id}: {params.action}")
        response = await self.client.post(f"/jobs/{params.id}/control", json=request_body(params, exclude={"id"}))
        return success_envelope(f"Job {params.action} operation completed successfully", response)

    async def delete_job(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting job: {params.id}")
        await self.client.delete(f"/jobs/{params.id}")
        return success_envelope("Job deleted successfully", {"id": params.id})

    async def get_job_logs(self, params: JobLogsInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting logs for job: {params.id}")
        query = request_body(params, exclude={"id"})
        response = await self.client.get(f"/jobs/{params.id}/logs", params=query or None)
        return success_envelope("Job logs retrieved successfully", response)

    # Queues

    async def list_job_queues(self, params: ActiveFilterInput) -> Dict[str, Any]:
        tool_logger.info("Listing job queues")
        response = await self.client.get("/jobs/queues", params=params.to_query_params() or None)
        return success_envelope("Job queues retrieved successfully", response)

    async def get_job_queue(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting job queue: {params.id}")
        response = await self.client.get(f"/jobs/queues/{params.id}")
        return success_envelope("Job queue retrieved successfully", response)

    async def create_job_queue(self, params: CreateJobQueueInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating job queue {params.name} in project {params.project_id}")
        response = await self.client.post("/jobs/queues", json=request_body(params))
        return success_envelope("Job queue created successfully", response)

    async def update_job_queue(self, params: UpdateJobQueueInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating job queue: {params.id}")
        response = await self.client.put(f"/jobs/queues/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Job queue updated successfully", response)

    async def delete_job_queue(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting job queue: {params.id}")
        await self.client.delete(f"/jobs/queues/{params.id}")
        return success_envelope("Job queue deleted successfully", {"id": params.id})

    # Templates

    async def list_job_templates(self, params: ListJobTemplatesInput) -> Dict[str, Any]:
        tool_logger.info("Listing job templates")
        response = await self.client.get("/jobs/templates", params=params.to_query_params() or None)
        return success_envelope("Job templates retrieved successfully", response)

    async def get_job_template(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting job template: {params.id}")
        response = await self.client.get(f"/jobs/templates/{params.id}")
        return success_envelope("Job template retrieved successfully", response)

    async def create_job_from_template(self, params: CreateJobFromTemplateInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating job {params.name} from template {params.template_id}")
        response = await self.client.post("/jobs/from-template", json=request_body(params))
        return success_envelope("Job created from template successfully", response)

    # Schedules

    async def list_job_schedules(self, params: ActiveFilterInput) -> Dict[str, Any]:
        tool_logger.info("Listing job schedules")
        response = await self.client.get("/jobs/schedules", params=params.to_query_params() or None)
        return success_envelope("Job schedules retrieved successfully", response)

    async def create_job_schedule(self, params: CreateJobScheduleInput) -> Dict[str, Any]:
        tool_logger.info(f"Creating job schedule {params.name} ({params.cron_expression})")
        response = await self.client.post("/jobs/schedules", json=request_body(params))
        return success_envelope("Job schedule created successfully", response)

    async def update_job_schedule(self, params: UpdateJobScheduleInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating job schedule: {params.id}")
        response = await self.client.put(f"/jobs/schedules/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("Job schedule updated successfully", response)

    async def delete_job_schedule(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting job schedule: {params.id}")
        await self.client.delete(f"/jobs/schedules/{params.id}")
        return success_envelope("Job schedule deleted successfully", {"id": params.id})
