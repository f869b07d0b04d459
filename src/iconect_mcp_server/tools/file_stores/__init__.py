"""
File Store Management Tools Module

This module provides tools for managing file stores and their usage statistics.
"""

from .file_store_tools import FileStoreTools

__all__ = ["FileStoreTools"]
