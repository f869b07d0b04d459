"""
Iconect MCP Server

FastMCP server exposing the Iconect API to agents over OAuth 2.0.
"""

__version__ = "1.0.0"
__author__ = "Iconect"
__description__ = "FastMCP server for the Iconect API"

__all__ = []
