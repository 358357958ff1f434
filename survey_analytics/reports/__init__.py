"""
Reports API

Aggregate reports and CSV export for a single form.

Version: reports_v1
"""

from .admin import router

__all__ = ["router"]

__version__ = "reports_v1"
