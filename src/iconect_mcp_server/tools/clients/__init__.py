"""
Client Management Tools Module
"""

from .client_tools import ClientTools

__all__ = ["ClientTools"]
