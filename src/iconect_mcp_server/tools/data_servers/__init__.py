"""
Data Server Management Tools Module
"""

from .data_server_tools import DataServerTools

__all__ = ["DataServerTools"]
