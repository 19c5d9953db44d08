"""Schedulability analysis and post-run reporting."""

from .audit import build_audit_report
from .compare import build_compare_report, compare_report_to_rows
from .schedulability import (
    analyze_task_set,
    hyperperiod,
    is_schedulable_edf,
    is_schedulable_rms,
    passes_rms_bound,
    rms_utilization_bound,
    total_density,
    total_utilization,
)

__all__ = [
    "analyze_task_set",
    "build_audit_report",
    "build_compare_report",
    "compare_report_to_rows",
    "hyperperiod",
    "is_schedulable_edf",
    "is_schedulable_rms",
    "passes_rms_bound",
    "rms_utilization_bound",
    "total_density",
    "total_utilization",
]
