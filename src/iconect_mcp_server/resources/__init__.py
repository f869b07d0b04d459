"""
Iconect MCP Server Resources Module

This module contains status resources.
"""

from .server_resources import server_status

__all__ = [
    "server_status"
]
