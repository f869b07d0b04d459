#!/usr/bin/env python3
"""
User Management Tools for Iconect MCP Server

Provides user directory operations, the current user's profile and
preferences, password changes and resets, roles, permissions and activity.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ...core.envelope import success_envelope
from ...core.errors import ValidationError
from ...core.http_client import IconectHttpClient
from ...core.logging_utils import get_tool_logger
from ...core.registry import CommandDescriptor, CommandInput
from ..common import PageInput, SortedPageInput, request_body

tool_logger = get_tool_logger("users")

UserStatus = Literal["active", "inactive", "suspended", "pending"]


class ListUsersInput(SortedPageInput):
    status: Optional[UserStatus] = Field(default=None, description="Only users in this state")
    role: Optional[str] = Field(default=None, description="Only users with this role")
    department: Optional[str] = Field(default=None, description="Only users in this department")
    search_query: Optional[str] = Field(default=None, alias="searchQuery", description="Free-text search on name or email")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params.update(request_body(self, include={"status", "role", "department"}))
        if self.search_query:
            params["q"] = self.search_query
        return params


class GetUserInput(CommandInput):
    id: str = Field(..., min_length=1, description="User ID")
    include_permissions: bool = Field(default=True, alias="includePermissions", description="Include permissions")


class GetCurrentUserInput(CommandInput):
    include_permissions: bool = Field(default=True, alias="includePermissions", description="Include permissions")
    include_preferences: bool = Field(default=True, alias="includePreferences", description="Include preferences")


class ProfileInput(CommandInput):
    first_name: Optional[str] = Field(default=None, alias="firstName", description="First name")
    last_name: Optional[str] = Field(default=None, alias="lastName", description="Last name")
    display_name: Optional[str] = Field(default=None, alias="displayName", description="Display name")
    title: Optional[str] = Field(default=None, description="Job title")
    department: Optional[str] = Field(default=None, description="Department")
    phone: Optional[str] = Field(default=None, description="Phone number")
    timezone: Optional[str] = Field(default=None, description="Timezone")
    locale: Optional[str] = Field(default=None, description="Locale")
    avatar: Optional[str] = Field(default=None, description="Avatar URL")


class UpdateUserInput(ProfileInput):
    id: str = Field(..., min_length=1, description="User ID")
    email: Optional[str] = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", description="Email address")
    status: Optional[UserStatus] = Field(default=None, description="Account status")
    roles: Optional[List[str]] = Field(default=None, description="Role names")
    permissions: Optional[List[str]] = Field(default=None, description="Direct permissions")


class NotificationPreferences(CommandInput):
    email: Optional[bool] = None
    browser: Optional[bool] = None
    mobile: Optional[bool] = None


class Preferences(CommandInput):
    theme: Optional[Literal["light", "dark", "auto"]] = None
    language: Optional[str] = None
    date_format: Optional[str] = Field(default=None, alias="dateFormat")
    time_format: Optional[Literal["12h", "24h"]] = Field(default=None, alias="timeFormat")
    default_page_size: Optional[int] = Field(default=None, ge=10, le=100, alias="defaultPageSize")
    notifications: Optional[NotificationPreferences] = None


class CurrentUserPreferencesInput(CommandInput):
    preferences: Preferences = Field(..., description="Preferences to change")


class UserPreferencesInput(CurrentUserPreferencesInput):
    user_id: str = Field(..., min_length=1, alias="userId", description="User ID")


class ChangePasswordInput(CommandInput):
    current_password: str = Field(..., min_length=1, alias="currentPassword", description="Current password")
    new_password: str = Field(..., min_length=8, alias="newPassword", description="New password (at least 8 characters)")
    confirm_password: str = Field(..., min_length=1, alias="confirmPassword", description="New password again")


class ResetPasswordInput(CommandInput):
    user_id: str = Field(..., min_length=1, alias="userId", description="User ID")
    new_password: str = Field(..., min_length=8, alias="newPassword", description="New password (at least 8 characters)")
    require_password_change: bool = Field(
        default=True, alias="requirePasswordChange", description="Force a change at next login"
    )


class UserPermissionsInput(CommandInput):
    user_id: str = Field(..., min_length=1, alias="userId", description="User ID")
    resource: Optional[str] = Field(default=None, description="Only permissions on this resource")
    action: Optional[str] = Field(default=None, description="Only permissions for this action")


class UserRolesInput(CommandInput):
    user_id: str = Field(..., min_length=1, alias="userId", description="User ID")
    roles: List[str] = Field(..., min_length=1, description="Role names replacing the current set")


class UserActivityInput(PageInput):
    user_id: str = Field(..., min_length=1, alias="userId", description="User ID")
    start_date: Optional[str] = Field(default=None, alias="startDate", description="Activity after this time (ISO-8601)")
    end_date: Optional[str] = Field(default=None, alias="endDate", description="Activity before this time (ISO-8601)")
    activity_type: Optional[Literal["login", "logout", "action", "error"]] = Field(
        default=None, alias="activityType", description="Only this kind of activity"
    )

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params.update(request_body(self, include={"start_date", "end_date"}))
        if self.activity_type:
            params["type"] = self.activity_type
        return params


class UserTools:
    def __init__(self, client: IconectHttpClient):
        self.client = client

    def get_commands(self) -> List[CommandDescriptor]:
        return [
            CommandDescriptor(
                "iconect_list_users", "List users with optional filtering and pagination", ListUsersInput, self.list_users
            ),
            CommandDescriptor("iconect_get_user", "Get a specific user by ID", GetUserInput, self.get_user),
            CommandDescriptor(
                "iconect_get_current_user",
                "Get current authenticated user information",
                GetCurrentUserInput,
                self.get_current_user,
            ),
            CommandDescriptor("iconect_update_user", "Update user information (admin only)", UpdateUserInput, self.update_user),
            CommandDescriptor(
                "iconect_update_current_user",
                "Update current user profile information",
                ProfileInput,
                self.update_current_user,
            ),
            CommandDescriptor(
                "iconect_update_user_preferences",
                "Update user preferences (admin or own preferences)",
                UserPreferencesInput,
                self.update_user_preferences,
            ),
            CommandDescriptor(
                "iconect_update_current_user_preferences",
                "Update current user preferences",
                CurrentUserPreferencesInput,
                self.update_current_user_preferences,
            ),
            CommandDescriptor(
                "iconect_change_password", "Change current user password", ChangePasswordInput, self.change_password
            ),
            CommandDescriptor(
                "iconect_reset_user_password", "Reset user password (admin only)", ResetPasswordInput, self.reset_user_password
            ),
            CommandDescriptor(
                "iconect_get_user_permissions",
                "Get user permissions with optional filtering",
                UserPermissionsInput,
                self.get_user_permissions,
            ),
            CommandDescriptor("iconect_update_user_roles", "Update user roles (admin only)", UserRolesInput, self.update_user_roles),
            CommandDescriptor(
                "iconect_get_user_activity",
                "Get user activity logs with optional filtering",
                UserActivityInput,
                self.get_user_activity,
            ),
        ]

    async def list_users(self, params: ListUsersInput) -> Dict[str, Any]:
        tool_logger.info("Listing users")
        response = await self.client.get("/users", params=params.to_query_params() or None)
        return success_envelope("Users retrieved successfully", response)

    async def get_user(self, params: GetUserInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting user: {params.id}")
        query = None if params.include_permissions else {"includePermissions": "false"}
        response = await self.client.get(f"/users/{params.id}", params=query)
        return success_envelope("User retrieved successfully", response)

    async def get_current_user(self, params: GetCurrentUserInput) -> Dict[str, Any]:
        tool_logger.info("Getting current user")
        # Both are included upstream unless switched off.
        query = {}
        if not params.include_permissions:
            query["includePermissions"] = "false"
        if not params.include_preferences:
            query["includePreferences"] = "false"
        response = await self.client.get("/users/me", params=query or None)
        return success_envelope("Current user retrieved successfully", response)

    async def update_user(self, params: UpdateUserInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating user: {params.id}")
        response = await self.client.put(f"/users/{params.id}", json=request_body(params, exclude={"id"}))
        return success_envelope("User updated successfully", response)

    async def update_current_user(self, params: ProfileInput) -> Dict[str, Any]:
        tool_logger.info("Updating current user profile")
        response = await self.client.put("/users/me", json=request_body(params))
        return success_envelope("User profile updated successfully", response)

    async def update_user_preferences(self, params: UserPreferencesInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating preferences for user: {params.user_id}")
        response = await self.client.put(
            f"/users/{params.user_id}/preferences", json=request_body(params, exclude={"user_id"})
        )
        return success_envelope("User preferences updated successfully", response)

    async def update_current_user_preferences(self, params: CurrentUserPreferencesInput) -> Dict[str, Any]:
        tool_logger.info("Updating current user preferences")
        response = await self.client.put("/users/me/preferences", json=request_body(params))
        return success_envelope("User preferences updated successfully", response)

    async def change_password(self, params: ChangePasswordInput) -> Dict[str, Any]:
        tool_logger.info("Changing current user password")
        if params.new_password != params.confirm_password:
            raise ValidationError("New password and confirmation do not match")
        await self.client.post(
            "/users/me/change-password",
            json=request_body(params, include={"current_password", "new_password"}),
        )
        return success_envelope("Password changed successfully")

    async def reset_user_password(self, params: ResetPasswordInput) -> Dict[str, Any]:
        tool_logger.info(f"Resetting password for user: {params.user_id}")
        await self.client.post(
            f"/users/{params.user_id}/reset-password", json=request_body(params, exclude={"user_id"})
        )
        return success_envelope("User password reset successfully", {"userId": params.user_id})

    async def get_user_permissions(self, params: UserPermissionsInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting permissions for user: {params.user_id}")
        query = request_body(params, exclude={"user_id"})
        response = await self.client.get(f"/users/{params.user_id}/permissions", params=query or None)
        return success_envelope("User permissions retrieved successfully", response)

    async def update_user_roles(self, params: UserRolesInput) -> Dict[str, Any]:
        tool_logger.info(f"Updating roles for user {params.user_id}: {params.roles}")
        response = await self.client.put(f"/users/{params.user_id}/roles", json={"roles": params.roles})
        return success_envelope("User roles updated successfully", response)

    async def get_user_activity(self, params: UserActivityInput) -> Dict[str, Any]:
        tool_logger.info(f"Getting activity for user: {params.user_id}")
        response = await self.client.get(f"/users/{params.user_id}/activity", params=params.to_query_params() or None)
        return success_envelope("User activity retrieved successfully", response)
