"""End-to-end tests for the capability modules through the dispatcher."""

import base64
import json
from urllib.parse import parse_qsl, urlsplit

import httpx
import pytest
import pytest_asyncio

from iconect_mcp_server.core.pkce import generate_code_challenge
from iconect_mcp_server.core.registry import CommandRegistry
from iconect_mcp_server.tools import get_all_commands
from iconect_mcp_server.tools.common import ListInput, flatten_filter

from .conftest import make_credentials


@pytest_asyncio.fixture
async def authenticated(configured_dispatcher):
    configured_dispatcher.session.token_store.set(make_credentials(access_token="T1"))
    return configured_dispatcher


class TestCommonInputs:
    """Tests for shared list inputs."""

    def test_flatten_filter(self) -> None:
        assert flatten_filter({"status": "active", "archived": False, "count": 3}) == {
            "filter.status": "active",
            "filter.archived": "false",
            "filter.count": "3",
        }
        assert flatten_filter(None) == {}

    def test_list_query_params(self) -> None:
        params = ListInput.model_validate({"page": 2, "pageSize": 50, "sortOrder": "desc", "filter": {"status": "active"}})

        assert params.to_query_params() == {
            "page": 2,
            "pageSize": 50,
            "sortOrder": "desc",
            "filter.status": "active",
        }


class TestRegistration:
    """Tests for the combined command set."""

    @pytest.mark.asyncio
    async def test_all_modules_register_unique_names(self, session) -> None:
        registry = CommandRegistry()
        registry.register(get_all_commands(session.http_client, session.auth))

        assert len(registry) == len(session.registry)
        assert all(name.startswith("iconect_") for name in registry.names())

    @pytest.mark.asyncio
    async def test_duplicate_names_rejected(self, session) -> None:
        registry = CommandRegistry()
        commands = get_all_commands(session.http_client, session.auth)

        with pytest.raises(ValueError, match="Duplicate command name"):
            registry.register(commands + commands[:1])


class TestProjectCommands:
    """Tests for project commands."""

    @pytest.mark.asyncio
    async def test_list_projects(self, authenticated, api) -> None:
        api.add("GET", "/v1/projects", (200, {"items": [{"id": "p1"}], "total": 1}))

        envelope = await authenticated.dispatch(
            "iconect_list_projects", {"page": 1, "pageSize": 10, "filter": {"status": "active"}}
        )

        assert envelope == {
            "success": True,
            "message": "Projects retrieved successfully",
            "data": {"items": [{"id": "p1"}], "total": 1},
        }
        request = api.calls("GET", "/v1/projects")[0]
        assert request.headers["Authorization"] == "Bearer T1"
        assert dict(request.url.params) == {"page": "1", "pageSize": "10", "filter.status": "active"}

    @pytest.mark.asyncio
    async def test_page_size_limit(self, authenticated, api) -> None:
        envelope = await authenticated.dispatch("iconect_list_projects", {"pageSize": 101})

        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_create_project_body(self, authenticated, api) -> None:
        api.add("POST", "/v1/projects", (201, {"id": "p9"}))

        envelope = await authenticated.dispatch(
            "iconect_create_project", {"name": "Matter 9", "clientId": "c7", "dataServerId": "ds1"}
        )

        assert envelope["data"] == {"id": "p9"}
        body = json.loads(api.calls("POST", "/v1/projects")[0].content)
        assert body == {"name": "Matter 9", "clientId": "c7", "dataServerId": "ds1", "status": "active"}

    @pytest.mark.asyncio
    async def test_update_project_excludes_id(self, authenticated, api) -> None:
        api.add("PUT", "/v1/projects/p1", (200, {"id": "p1", "status": "archived"}))

        await authenticated.dispatch("iconect_update_project", {"id": "p1", "status": "archived"})

        assert json.loads(api.calls("PUT", "/v1/projects/p1")[0].content) == {"status": "archived"}

    @pytest.mark.asyncio
    async def test_not_found(self, authenticated, api) -> None:
        api.add("GET", "/v1/projects/missing", (404, {"message": "Project not found"}))

        envelope = await authenticated.dispatch("iconect_get_project", {"id": "missing"})

        assert envelope == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Project not found", "statusCode": 404},
        }


class TestRecordCommands:
    """Tests for record commands."""

    @pytest.mark.asyncio
    async def test_search_query_params(self, authenticated, api) -> None:
        api.add("GET", "/v1/records/search", (200, {"items": []}))

        await authenticated.dispatch("iconect_search_records", {
            "projectId": "p1",
            "query": "contract",
            "tags": ["hot", "privileged"],
            "status": ["active"],
            "dateRange": {"field": "createdDate", "from": "2024-01-01"},
            "filters": {"custodian": "smith"},
        })

        params = api.calls("GET", "/v1/records/search")[0].url.params
        assert params["projectId"] == "p1"
        assert params["query"] == "contract"
        assert params.get_list("tags") == ["hot", "privileged"]
        assert params.get_list("status") == ["active"]
        assert params["dateRange.field"] == "createdDate"
        assert params["dateRange.from"] == "2024-01-01"
        assert "dateRange.to" not in params
        assert params["filter.custodian"] == "smith"

    @pytest.mark.asyncio
    async def test_search_rejects_unknown_status(self, authenticated, api) -> None:
        envelope = await authenticated.dispatch("iconect_search_records", {"projectId": "p1", "status": ["lost"]})

        assert envelope["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_permanent_delete(self, authenticated, api) -> None:
        api.add("DELETE", "/v1/records/r1", (204, None))

        envelope = await authenticated.dispatch("iconect_delete_record", {"id": "r1", "permanent": True})

        assert envelope == {
            "success": True,
            "message": "Record permanently deleted",
            "data": {"id": "r1", "permanent": True},
        }
        assert api.calls("DELETE", "/v1/records/r1")[0].url.params["permanent"] == "true"

    @pytest.mark.asyncio
    async def test_bulk_update_and_status(self, authenticated, api) -> None:
        api.add("POST", "/v1/records/bulk", (202, {"operationId": "op1", "status": "pending"}))
        api.add("GET", "/v1/records/bulk/op1", (200, {"operationId": "op1", "status": "completed"}))

        started = await authenticated.dispatch(
            "iconect_bulk_update_records",
            {"projectId": "p1", "action": "tag", "recordIds": ["r1", "r2"], "parameters": {"tags": ["hot"]}},
        )
        status = await authenticated.dispatch("iconect_get_bulk_operation_status", {"operationId": "op1"})

        assert started["data"]["operationId"] == "op1"
        assert json.loads(api.calls("POST", "/v1/records/bulk")[0].content) == {
            "projectId": "p1",
            "action": "tag",
            "recordIds": ["r1", "r2"],
            "parameters": {"tags": ["hot"]},
        }
        assert status["data"]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_bulk_update_requires_records(self, authenticated, api) -> None:
        envelope = await authenticated.dispatch(
            "iconect_bulk_update_records", {"projectId": "p1", "action": "delete", "recordIds": []}
        )

        assert envelope["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_relationship_lifecycle(self, authenticated, api) -> None:
        api.add("POST", "/v1/records/relationships", (201, {"id": "rel1", "relationshipType": "duplicate"}))
        api.add("GET", "/v1/records/r1/relationships", (200, [{"id": "rel1"}]))
        api.add("DELETE", "/v1/records/relationships/rel1", (204, None))

        created = await authenticated.dispatch("iconect_create_record_relationship", {
            "sourceRecordId": "r1",
            "targetRecordId": "r2",
            "relationshipType": "duplicate",
        })
        listed = await authenticated.dispatch(
            "iconect_get_record_relationships", {"recordId": "r1", "relationshipType": "duplicate"}
        )
        deleted = await authenticated.dispatch("iconect_delete_record_relationship", {"id": "rel1"})

        assert created["message"] == "Record relationship created successfully"
        assert json.loads(api.calls("POST", "/v1/records/relationships")[0].content) == {
            "sourceRecordId": "r1",
            "targetRecordId": "r2",
            "relationshipType": "duplicate",
        }
        assert listed["data"] == [{"id": "rel1"}]
        assert dict(api.calls("GET", "/v1/records/r1/relationships")[0].url.params) == {"type": "duplicate"}
        assert deleted == {
            "success": True,
            "message": "Record relationship deleted successfully",
            "data": {"id": "rel1"},
        }

    @pytest.mark.asyncio
    async def test_relationship_type_is_checked(self, authenticated, api) -> None:
        envelope = await authenticated.dispatch(
            "iconect_create_record_relationship",
            {"sourceRecordId": "r1", "targetRecordId": "r2", "relationshipType": "sibling"},
        )

        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert api.requests == []


class TestFileCommands:
    """Tests for file upload and download."""

    @pytest.mark.asyncio
    async def test_upload_file_body(self, authenticated, api) -> None:
        api.add("POST", "/v1/files/upload", (201, {"id": "f1"}))

        envelope = await authenticated.dispatch("iconect_upload_file", {
            "fileName": "memo.txt",
            "fileContent": "aGVsbG8=",
            "projectId": "p1",
            "fileStoreId": "fs1",
        })

        assert envelope["message"] == "File uploaded successfully"
        assert json.loads(api.calls("POST", "/v1/files/upload")[0].content) == {
            "fileName": "memo.txt",
            "fileContent": "aGVsbG8=",
            "projectId": "p1",
            "fileStoreId": "fs1",
        }

    @pytest.mark.asyncio
    async def test_download_range_is_base64(self, authenticated, api) -> None:
        api.add("GET", "/v1/files/f1/download", lambda request: httpx.Response(206, content=b"hello"))

        envelope = await authenticated.dispatch(
            "iconect_download_file", {"id": "f1", "range": {"start": 0, "end": 4}}
        )

        assert envelope["data"] == {
            "content": base64.b64encode(b"hello").decode("ascii"),
            "responseType": "base64",
            "contentLength": 5,
        }
        assert api.calls("GET", "/v1/files/f1/download")[0].headers["Range"] == "bytes=0-4"


class TestFolderCommands:
    """Tests for folder commands."""

    @pytest.mark.asyncio
    async def test_delete_moves_contents(self, authenticated, api) -> None:
        api.add("DELETE", "/v1/folders/d1", (204, None))

        envelope = await authenticated.dispatch("iconect_delete_folder", {"id": "d1", "moveContentsTo": "d0"})

        assert envelope["data"] == {"id": "d1", "recursive": False, "moveContentsTo": "d0"}
        assert dict(api.calls("DELETE", "/v1/folders/d1")[0].url.params) == {"moveContentsTo": "d0"}

    @pytest.mark.asyncio
    async def test_tree_default_depth(self, authenticated, api) -> None:
        api.add("GET", "/v1/folders/tree", (200, [{"id": "d1", "children": []}]))

        await authenticated.dispatch("iconect_get_folder_tree", {"projectId": "p1"})

        params = api.calls("GET", "/v1/folders/tree")[0].url.params
        assert params["projectId"] == "p1"
        assert params["maxDepth"] == "5"


class TestFieldCommands:
    """Tests for field commands."""

    @pytest.mark.asyncio
    async def test_validate_field_value(self, authenticated, api) -> None:
        api.add("POST", "/v1/fields/fl1/validate", (200, {"isValid": False, "errors": ["too long"]}))

        envelope = await authenticated.dispatch("iconect_validate_field_value", {"fieldId": "fl1", "value": "x" * 300})

        assert envelope["message"] == "Field value validation completed"
        assert envelope["data"]["isValid"] is False
        assert json.loads(api.calls("POST", "/v1/fields/fl1/validate")[0].content) == {"value": "x" * 300}


class TestJobCommands:
    """Tests for job commands."""

    @pytest.mark.asyncio
    async def test_control_job(self, authenticated, api) -> None:
        api.add("POST", "/v1/jobs/j1/control", (200, {"id": "j1", "status": "paused"}))

        envelope = await authenticated.dispatch("iconect_control_job", {"id": "j1", "action": "pause", "reason": "night"})

        assert envelope["message"] == "Job pause operation completed successfully"
        assert json.loads(api.calls("POST", "/v1/jobs/j1/control")[0].content) == {"action": "pause", "reason": "night"}

    @pytest.mark.asyncio
    async def test_unknown_action(self, authenticated, api) -> None:
        envelope = await authenticated.dispatch("iconect_control_job", {"id": "j1", "action": "explode"})

        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert api.requests == []


class TestUserCommands:
    """Tests for user commands."""

    @pytest.mark.asyncio
    async def test_change_password(self, authenticated, api) -> None:
        api.add("POST", "/v1/users/me/change-password", (204, None))

        envelope = await authenticated.dispatch("iconect_change_password", {
            "currentPassword": "old-secret",
            "newPassword": "new-secret-1",
            "confirmPassword": "new-secret-1",
        })

        assert envelope == {"success": True, "message": "Password changed successfully"}
        assert json.loads(api.calls("POST", "/v1/users/me/change-password")[0].content) == {
            "currentPassword": "old-secret",
            "newPassword": "new-secret-1",
        }

    @pytest.mark.asyncio
    async def test_password_confirmation_mismatch(self, authenticated, api) -> None:
        envelope = await authenticated.dispatch("iconect_change_password", {
            "currentPassword": "old-secret",
            "newPassword": "new-secret-1",
            "confirmPassword": "new-secret-2",
        })

        assert envelope["error"]["code"] == "VALIDATION_ERROR"
        assert envelope["error"]["message"] == "New password and confirmation do not match"
        assert api.requests == []


class TestPanelCommands:
    """Tests for panel commands."""

    @pytest.mark.asyncio
    async def test_panel_data_splits_paging_and_body(self, authenticated, api) -> None:
        api.add("POST", "/v1/panels/pn1/data", (200, {"rows": [], "total": 0}))

        await authenticated.dispatch("iconect_get_panel_data", {
            "id": "pn1",
            "filters": {"custodian": "smith"},
            "sorting": [{"field": "date", "order": "desc"}],
            "page": 2,
            "pageSize": 500,
        })

        request = api.calls("POST", "/v1/panels/pn1/data")[0]
        assert dict(request.url.params) == {"page": "2", "pageSize": "500"}
        assert json.loads(request.content) == {
            "filters": {"custodian": "smith"},
            "sorting": [{"field": "date", "order": "desc"}],
        }


class TestTemplateCommands:
    """Tests for template commands."""

    @pytest.mark.asyncio
    async def test_render_template(self, authenticated, api) -> None:
        api.add("POST", "/v1/templates/t1/render", (200, {"content": "Dear Smith"}))

        envelope = await authenticated.dispatch(
            "iconect_render_template", {"id": "t1", "variables": {"name": "Smith"}, "outputFormat": "txt"}
        )

        assert envelope["data"] == {"content": "Dear Smith"}
        assert json.loads(api.calls("POST", "/v1/templates/t1/render")[0].content) == {
            "variables": {"name": "Smith"},
            "outputFormat": "txt",
        }


class TestViewCommands:
    """Tests for view commands."""

    @pytest.mark.asyncio
    async def test_share_view(self, authenticated, api) -> None:
        api.add("POST", "/v1/views/v1/share", (200, {"shareToken": "tok"}))

        envelope = await authenticated.dispatch("iconect_share_view", {"id": "v1", "isPublic": True})

        assert envelope["message"] == "View sharing configured successfully"
        assert json.loads(api.calls("POST", "/v1/views/v1/share")[0].content) == {
            "isPublic": True,
            "allowAnonymous": False,
        }


class TestDashboardCommands:
    """Tests for dashboard and widget commands."""

    @pytest.mark.asyncio
    async def test_widget_data(self, authenticated, api) -> None:
        api.add("POST", "/v1/dashboards/db1/widgets/w1/data", (200, {"series": [1, 2]}))

        envelope = await authenticated.dispatch("iconect_get_widget_data", {
            "dashboardId": "db1",
            "widgetId": "w1",
            "dateRange": {"start": "2024-01-01", "end": "2024-02-01"},
        })

        assert envelope["message"] == "Widget data retrieved successfully"
        assert json.loads(api.calls("POST", "/v1/dashboards/db1/widgets/w1/data")[0].content) == {
            "dateRange": {"start": "2024-01-01", "end": "2024-02-01"},
        }

    @pytest.mark.asyncio
    async def test_share_defaults_to_view(self, authenticated, api) -> None:
        api.add("POST", "/v1/dashboards/db1/share", (200, {"shareUrl": "https://x"}))

        await authenticated.dispatch("iconect_share_dashboard", {"id": "db1", "shareType": "token"})

        assert json.loads(api.calls("POST", "/v1/dashboards/db1/share")[0].content) == {
            "shareType": "token",
            "permissions": ["view"],
        }


class TestThemeCommands:
    """Tests for theme commands."""

    @pytest.mark.asyncio
    async def test_apply_theme(self, authenticated, api) -> None:
        api.add("POST", "/v1/themes/th1/apply", (204, None))

        envelope = await authenticated.dispatch("iconect_apply_theme", {"themeId": "th1", "scope": "project", "targetId": "p1"})

        assert envelope == {
            "success": True,
            "message": "Theme applied successfully",
            "data": {"themeId": "th1", "scope": "project"},
        }
        assert json.loads(api.calls("POST", "/v1/themes/th1/apply")[0].content) == {"scope": "project", "targetId": "p1"}

    @pytest.mark.asyncio
    async def test_current_theme_query(self, authenticated, api) -> None:
        api.add("GET", "/v1/themes/current", (200, {"theme": {"id": "th1"}, "scope": "user"}))

        await authenticated.dispatch("iconect_get_current_theme", {"scope": "user"})

        assert dict(api.calls("GET", "/v1/themes/current")[0].url.params) == {"scope": "user"}


class TestOtherResources:
    """Tests for file stores, clients and data servers."""

    @pytest.mark.asyncio
    async def test_file_store_stats(self, authenticated, api) -> None:
        api.add("GET", "/v1/file-stores/fs1/stats", (200, {"usedSpace": 10, "fileCount": 2}))

        envelope = await authenticated.dispatch("iconect_get_file_store_stats", {"id": "fs1"})

        assert envelope["data"] == {"usedSpace": 10, "fileCount": 2}

    @pytest.mark.asyncio
    async def test_delete_client(self, authenticated, api) -> None:
        api.add("DELETE", "/v1/clients/c9", (204, None))

        envelope = await authenticated.dispatch("iconect_delete_client", {"id": "c9"})

        assert envelope == {"success": True, "message": "Client deleted successfully", "data": {"id": "c9"}}

    @pytest.mark.asyncio
    async def test_list_data_servers_server_error(self, authenticated, api) -> None:
        api.add("GET", "/v1/data-servers", (502, None))

        envelope = await authenticated.dispatch("iconect_list_data_servers", {})

        assert envelope["error"] == {"code": "SERVER_ERROR", "message": "HTTP 502", "statusCode": 502}


class TestAuthCommands:
    """Tests for auth commands that do not hit the token endpoint."""

    @pytest.mark.asyncio
    async def test_generate_auth_url_with_pkce(self, configured_dispatcher) -> None:
        envelope = await configured_dispatcher.dispatch(
            "iconect_generate_auth_url", {"redirectUri": "https://app.test/cb", "usePkce": True}
        )

        data = envelope["data"]
        params = dict(parse_qsl(urlsplit(data["authUrl"]).query))
        assert data["usePKCE"] is True
        assert params["code_challenge"] == generate_code_challenge(data["codeVerifier"])
        assert params["state"] == data["state"]
        assert len(data["state"]) == 32

    @pytest.mark.asyncio
    async def test_generate_auth_url_with_given_challenge(self, configured_dispatcher) -> None:
        envelope = await configured_dispatcher.dispatch(
            "iconect_generate_auth_url",
            {"redirectUri": "https://app.test/cb", "codeChallenge": "abc", "state": "s1"},
        )

        data = envelope["data"]
        assert data["usePKCE"] is True
        assert data["state"] == "s1"
        assert "codeVerifier" not in data

    @pytest.mark.asyncio
    async def test_logout(self, authenticated) -> None:
        envelope = await authenticated.dispatch("iconect_logout", {})

        assert envelope == {"success": True, "message": "Logout successful", "data": {}}
        status = await authenticated.dispatch("iconect_get_auth_status", {})
        assert status == {"success": True, "message": "Not authenticated", "data": {"authenticated": False}}
