"""
Authentication Tools Module

This module provides the OAuth grant, logout and status commands.
"""

from .auth_tools import AuthTools

__all__ = ["AuthTools"]
