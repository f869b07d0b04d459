"""
Panel Management Tools Module
"""

from .panel_tools import PanelTools

__all__ = ["PanelTools"]
