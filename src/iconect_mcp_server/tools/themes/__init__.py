"""
Theme Management Tools Module
"""

from .theme_tools import ThemeTools

__all__ = ["ThemeTools"]
