"""
Field Management Tools Module
"""

from .field_tools import FieldTools

__all__ = ["FieldTools"]
