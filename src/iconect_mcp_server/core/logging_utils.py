"""
Shared logging utilities for Iconect MCP Server tools.
"""
import logging

ROOT_LOGGER_NAME = "iconect"
PACKAGE_LOGGER_NAME = "iconect_mcp_server"

# Tool logger name -> log file under logs/tools/ (see main.setup_logging)
TOOL_LOG_FILES = {
    "auth": "authentication.log",
    "data_servers": "data-server-management.log",
    "projects": "project-management.log",
    "clients": "client-management.log",
    "file_stores": "file-store-management.log",
    "records": "record-management.log",
    "files": "file-management.log",
    "folders": "folder-management.log",
    "fields": "field-management.log",
    "jobs": "job-management.log",
    "users": "user-management.log",
    "panels": "panel-management.log",
    "templates": "template-management.log",
    "views": "view-management.log",
    "dashboards": "dashboard-management.log",
    "themes": "theme-management.log",
}


def get_tool_logger(tool_name: str) -> logging.Logger:
    """Get the logger for a capability module.

    Args:
        tool_name: The tool name (e.g., 'auth', 'projects', 'records')
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.tools.{tool_name}")


def set_log_level(level: str) -> None:
    """Apply a log level to the gateway loggers and every tool logger."""
    numeric_level = getattr(logging, level.upper())
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(numeric_level)
    logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(numeric_level)
    for tool_name in TOOL_LOG_FILES:
        get_tool_logger(tool_name).setLevel(numeric_level)
