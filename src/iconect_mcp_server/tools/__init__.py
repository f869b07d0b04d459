"""
Iconect Capability Tools Module

Each capability module contributes a list of command descriptors. The
registration order here is the order commands are advertised in.
"""

from typing import List

from ..core.auth import IconectAuth
from ..core.http_client import IconectHttpClient
from ..core.registry import CommandDescriptor
from .auth.auth_tools import AuthTools
from .clients.client_tools import ClientTools
from .dashboards.dashboard_tools import DashboardTools
from .data_servers.data_server_tools import DataServerTools
from .fields.field_tools import FieldTools
from .file_stores.file_store_tools import FileStoreTools
from .files.file_tools import FileTools
from .folders.folder_tools import FolderTools
from .jobs.job_tools import JobTools
from .panels.panel_tools import PanelTools
from .projects.project_tools import ProjectTools
from .records.record_tools import RecordTools
from .templates.template_tools import TemplateTools
from .themes.theme_tools import ThemeTools
from .users.user_tools import UserTools
from .views.view_tools import ViewTools


def get_tool_modules(http_client: IconectHttpClient, auth: IconectAuth) -> list:
    """Instantiate every capability module for one configured session."""
    return [
        AuthTools(auth),
        DataServerTools(http_client),
        ProjectTools(http_client),
        ClientTools(http_client),
        FileStoreTools(http_client),
        RecordTools(http_client),
        FileTools(http_client),
        FolderTools(http_client),
        FieldTools(http_client),
        JobTools(http_client),
        UserTools(http_client),
        PanelTools(http_client),
        TemplateTools(http_client),
        ViewTools(http_client),
        DashboardTools(http_client),
        ThemeTools(http_client),
    ]


def get_all_commands(http_client: IconectHttpClient, auth: IconectAuth) -> List[CommandDescriptor]:
    commands: List[CommandDescriptor] = []
    for module in get_tool_modules(http_client, auth):
        commands.extend(module.get_commands())
    return commands


__all__ = [
    "AuthTools",
    "ClientTools",
    "DashboardTools",
    "DataServerTools",
    "FieldTools",
    "FileStoreTools",
    "FileTools",
    "FolderTools",
    "JobTools",
    "PanelTools",
    "ProjectTools",
    "RecordTools",
    "TemplateTools",
    "ThemeTools",
    "UserTools",
    "ViewTools",
    "get_all_commands",
    "get_tool_modules",
]
