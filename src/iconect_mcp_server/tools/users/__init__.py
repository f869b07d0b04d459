"""
User Management Tools Module
"""

from .user_tools import UserTools

__all__ = ["UserTools"]
