"""
View Management Tools Module
"""

from .view_tools import ViewTools

__all__ = ["ViewTools"]
