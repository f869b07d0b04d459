"""
Record Management Tools Module
"""

from .record_tools import RecordTools

__all__ = ["RecordTools"]
