"""I/O exports."""

from .artifacts import write_json, write_jsonl, write_rows_csv, write_timeline_csv
from .experiment_runner import BatchCase, BatchRunSummary, ExperimentRunner, apply_case, run_spec
from .loader import ConfigError, ConfigLoader, ValidationIssue, read_payload, resolve_horizon
from .schema import CONFIG_SCHEMA
from .task_input import parse_task_input, parse_task_spec

__all__ = [
    "BatchCase",
    "BatchRunSummary",
    "CONFIG_SCHEMA",
    "ConfigError",
    "ConfigLoader",
    "ExperimentRunner",
    "ValidationIssue",
    "apply_case",
    "parse_task_input",
    "parse_task_spec",
    "read_payload",
    "resolve_horizon",
    "run_spec",
    "write_json",
    "write_jsonl",
    "write_rows_csv",
    "write_timeline_csv",
]
