"""Functional core - pure business logic with no I/O."""

from .models import Category, Sprint, DailyEntry, ReportOutput
from .sprint_codes import sprint_number, next_sprint_code, normalize_sprint_codes
from .active import active_sprint, pick_active_sprint
from .report import render_report, filter_entries, sort_entries, group_entries

__all__ = [
    # Models
    "Category",
    "Sprint",
    "DailyEntry",
    "ReportOutput",
    # Sprint codes
    "sprint_number",
    "next_sprint_code",
    "normalize_sprint_codes",
    # Active sprint
    "active_sprint",
    "pick_active_sprint",
    # Report
    "render_report",
    "filter_entries",
    "sort_entries",
    "group_entries",
]
