"""
Project Management Tools Module
"""

from .project_tools import ProjectTools

__all__ = ["ProjectTools"]
