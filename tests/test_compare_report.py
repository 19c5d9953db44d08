from __future__ import annotations

import pytest

from rtsched.analysis import build_compare_report, compare_report_to_rows
from rtsched.core import SimEngine
from rtsched.model import Task
from rtsched.schedulers import EDFScheduler, RMScheduler


def _metrics(scheduler) -> dict:
    engine = SimEngine(scheduler)
    engine.build([Task("A", 2, 5), Task("B", 4, 7)], 35)
    engine.run()
    return engine.metric_report()


def test_compare_report_contains_scalar_and_task_rows() -> None:
    report = build_compare_report(
        _metrics(RMScheduler()),
        _metrics(EDFScheduler()),
        left_label="rm",
        right_label="edf",
    )
    assert report["left_label"] == "rm"
    assert report["right_label"] == "edf"

    scalar = {row["metric"]: row for row in report["scalar_metrics"]}
    assert scalar["deadline_miss_count"]["left"] > 0
    assert scalar["deadline_miss_count"]["right"] == 0.0
    assert scalar["deadline_miss_count"]["delta"] == -scalar["deadline_miss_count"]["left"]
    assert scalar["jobs_released"]["delta"] == 0.0

    task_rows = [row for row in report["per_task"] if row["metric"] == "missed"]
    assert [row["task_id"] for row in task_rows] == ["A", "B"]
    assert task_rows[0]["left"] == 0.0


def test_compare_report_handles_zero_and_missing_values() -> None:
    report = build_compare_report({"preempt_count": 0}, {"preempt_count": 3, "busy_time": "n/a"})
    scalar = {row["metric"]: row for row in report["scalar_metrics"]}
    assert scalar["preempt_count"]["delta"] == 3.0
    assert scalar["preempt_count"]["delta_ratio_pct"] == 0.0
    assert scalar["busy_time"]["right"] == 0.0
    assert report["per_task"] == []


def test_compare_report_ratio_and_rows() -> None:
    report = build_compare_report(
        {"busy_time": 10, "per_task": {"A": {"completed": 4}}},
        {"busy_time": 15, "per_task": {"A": {"completed": 5}}},
        scalar_keys=("busy_time",),
    )
    assert report["scalar_metrics"][0]["delta_ratio_pct"] == pytest.approx(50.0)

    rows = compare_report_to_rows(report)
    assert rows[0]["category"] == "scalar"
    assert rows[0]["task_id"] == ""
    per_task = [row for row in rows if row["category"] == "per_task"]
    assert len(per_task) == 4
    completed = next(row for row in per_task if row["metric"] == "completed")
    assert completed["delta"] == 1.0
