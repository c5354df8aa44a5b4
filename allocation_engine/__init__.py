"""Allocation and availability logic shared by the services and the MCP server."""

from .availability import describe_assignment, is_available, partition_by_availability
from .colors import PALETTE, ColorAllocator
from .conflicts import check_conflicts, conflict_summary
from .dates import date_in_range, parse_date, ranges_overlap
from .metrics import dashboard_overview, utilization

__all__ = [
    "PALETTE",
    "ColorAllocator",
    "check_conflicts",
    "conflict_summary",
    "dashboard_overview",
    "date_in_range",
    "describe_assignment",
    "is_available",
    "parse_date",
    "partition_by_availability",
    "ranges_overlap",
    "utilization",
]
