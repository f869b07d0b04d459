"""
Dashboard Management Tools Module
"""

from .dashboard_tools import DashboardTools

__all__ = ["DashboardTools"]
