#!/usr/bin/env python3
"""
File Management Tools for Iconect MCP Server

Provides file operations: listing, metadata, single-shot upload, chunked
upload sessions for large files, download and delete. File content travels
base64 encoded in both directions.
"""

import base64
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import IdInput, ListInput, request_body

tool_logger = get_tool_logger("files")


class ListFilesInput(ListInput):
    project_id: Optional[str] = Field(default=None, alias="projectId", description="Only files in this project")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Only files in this folder")

    def to_query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.project_id:
            params["projectId"] = self.project_id
        if self.folder_id:
            params["folderId"] = self.folder_id
        params.update(super().to_query_params())
        return params


class UploadFileInput(CommandInput):
    file_name: str = Field(..., min_length=1, alias="fileName", description="Name of the file")
    file_content: str = Field(..., min_length=1, alias="fileContent", description="File content, base64 encoded")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    file_store_id: str = Field(..., min_length=1, alias="fileStoreId", description="File store ID")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Folder ID")
    mime_type: Optional[str] = Field(default=None, alias="mimeType", description="MIME type of the file")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class InitiateChunkedUploadInput(CommandInput):
    file_name: str = Field(..., min_length=1, alias="fileName", description="Name of the file")
    file_size: int = Field(..., gt=0, alias="fileSize", description="Total file size in bytes")
    project_id: str = Field(..., min_length=1, alias="projectId", description="Project ID")
    file_store_id: str = Field(..., min_length=1, alias="fileStoreId", description="File store ID")
    folder_id: Optional[str] = Field(default=None, alias="folderId", description="Folder ID")
    mime_type: Optional[str] = Field(default=None, alias="mimeType", description="MIME type of the file")
    chunk_size: Optional[int] = Field(default=None, gt=0, alias="chunkSize", description="Chunk size in bytes")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Additional metadata")


class UploadChunkInput(CommandInput):
    upload_session_id: str = Field(..., min_length=1, alias="uploadSessionId", description="Upload session ID")
    chunk_number: int = Field(..., ge=0, alias="chunkNumber", description="Zero-based chunk number")
    chunk_data: str = Field(..., min_length=1, alias="chunkData", description="Chunk content, base64 encoded")


class CompleteChunkedUploadInput(CommandInput):
    upload_session_id: str = Field(..., min_length=1, alias="uploadSessionId", description="Upload session ID")


class ByteRange(CommandInput):
    start: int = Field(..., ge=0, description="First byte (inclusive)")
    end: int = Field(..., ge=0, description="Last byte (inclusive)")


class DownloadFileInput(CommandInput):
    id: str = Field(..., min_length=1, description="File ID")
    response_type: Literal["stream", "buffer", "base64"] = Field(
        default="base64", alias="responseType", description="Requested response type (content is always returned base64 encoded)"
    )
    range: Optional[ByteRange] = Field(default=None, description="Byte range to download")


class FileTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_files", "List files with optional filtering and pagination", ListFilesInput, self.list_files
            ),
            CommandDescriptor("iconect_get_file", "Get file metadata by ID", IdInput, self.get_file),
            CommandDescriptor(
                "iconect_upload_file", "Upload a single file (for small files)", UploadFileInput, self.upload_file
            ),
            CommandDescriptor(
                "iconect_initiate_chunked_upload",
                "Initiate a chunked upload session for large files",
                InitiateChunkedUploadInput,
                self.initiate_chunked_upload,
            ),
            CommandDescriptor(
                "iconect_upload_chunk",
                "Upload a chunk as part of a chunked upload session",
                UploadChunkInput,
                self.upload_chunk,
            ),
            CommandDescriptor(
                "iconect_complete_chunked_upload",
                "Complete a chunked upload session",
                CompleteChunkedUploadInput,
                self.complete_chunked_upload,
            ),
            CommandDescriptor(
                "iconect_get_upload_session", "Get upload session status and progress", IdInput, self.get_upload_session
            ),
            CommandDescriptor("iconect_download_file", "Download file content", DownloadFileInput, self.download_file),
            CommandDescriptor("iconect_delete_file", "Delete a file", IdInput, self.delete_file),
        ]

    async def list_files(self, params: ListFilesInput) -> Dict[str, Any]:
        tool_logger.info("Listing files")
        response = await self.client.get("/files", params=params.to_query_params())
        return success_envelope("Files retrieved successfully", response)

    async def get_file(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting file metadata: {params.id}")
        response = await self.client.get(f"/files/{params.id}")
        return success_envelope("File metadata retrieved successfully", response)

    async def upload_file(self, params: UploadFileInput) -> Dict[str, Any]:
        tool_logger.info(f"Uploading file {params.file_name} to project {params.project_id}")
        response = await self.client.post("/files/upload", json=request_body(params))
        return success_envelope("File uploaded successfully", response)

    async def initiate_chunked_upload(self, params: InitiateChunkedUploadInput) -> Dict[str, Any]:
        tool_logger.info(f"Initiating chunked upload of {params.file_name} ({params.file_size} bytes)")
        response = await self.client.post("/files/upload/chunked/initiate", json=request_body(params))
        return success_envelope("Chunked upload session initiated", response)

    async def upload_chunk(self, params: UploadChunkInput) -> Dict[str, Any]:
        tool_logger.info(f"Uploading chunk {params.chunk_number} for session {params.upload_session_id}")
        response = await self.client.post(
            f"/files/upload/chunked/{params.upload_session_id}/chunks/{params.chunk_number}",
            json={"chunkData": params.chunk_data},
        )
        return success_envelope("Chunk uploaded successfully", response)

    async def complete_chunked_upload(self, params: CompleteChunkedUploadInput) -> Dict[str, Any]:
        tool_logger.info(f"Completing chunked upload: {params.upload_session_id}")
        response = await self.client.post(f"/files/upload/chunked/{params.upload_session_id}/complete", json={})
        return success_envelope("Chunked upload completed successfully", response)

    async def get_upload_session(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting upload session: {params.id}")
        response = await self.client.get(f"/files/upload/chunked/{params.id}")
        return success_envelope("Upload session retrieved successfully", response)

    async def download_file(self, params: DownloadFileInput) -> Dict[str, Any]:
        tool_logger.info(f"Downloading file: {params.id}")
        headers = None
        if params.range:
            headers = {"Range": f"bytes={params.range.start}-{params.range.end}"}
        content = await self.client.get(f"/files/{params.id}/download", headers=headers, raw=True)
        content = content or b""
        return success_envelope("File downloaded successfully", {
            "content": base64.b64encode(content).decode("ascii"),
            "responseType": params.response_type,
            "contentLength": len(content),
        })

    async def delete_file(self, params: IdInput) -> Dict[str, Any]:
        tool_logger.info(f"Deleting file: {params.id}")
        await self.client.delete(f"/files/{params.id}")
        return success_envelope("File deleted successfully", {"id": params.id})
