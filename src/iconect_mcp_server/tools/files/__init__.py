"""
File Management Tools Module
"""

from .file_tools import FileTools

__all__ = ["FileTools"]
