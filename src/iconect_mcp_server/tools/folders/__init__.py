"""
Folder Management Tools Module
"""

from .folder_tools import FolderTools

__all__ = ["FolderTools"]
