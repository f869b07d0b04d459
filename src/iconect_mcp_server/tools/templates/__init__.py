"""
Template Management Tools Module
"""

from .template_tools import TemplateTools

__all__ = ["TemplateTools"]
