"""
Job Management Tools Module
"""

from .job_tools import JobTools

__all__ = ["JobTools"]
