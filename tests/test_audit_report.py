from __future__ import annotations

from rtsched.analysis import build_audit_report
from rtsched.core import SimEngine
from rtsched.model import IDLE, Task
from rtsched.schedulers import EDFScheduler, RMScheduler


def _run(scheduler, tasks: list[Task], horizon: int) -> tuple[list[dict], tuple[str, ...]]:
    engine = SimEngine(scheduler)
    engine.build(tasks, horizon)
    engine.run()
    events = [event.model_dump(mode="json") for event in engine.events]
    return events, engine.result().timeline


def _rules(report: dict) -> set[str]:
    return {issue["rule"] for issue in report["issues"]}


def test_audit_passes_for_overloaded_rm_run() -> None:
    events, timeline = _run(RMScheduler(), [Task("A", 3, 4), Task("B", 3, 6)], 24)
    report = build_audit_report(events, timeline=timeline, horizon=24, scheduler_name="rm")
    assert report["status"] == "pass"
    assert report["scheduler"] == "rm"
    assert report["issue_count"] == 0
    assert set(report["checks"]) == {"unit_slot_coverage", "execution_budget", "deadline_miss_consistency"}
    assert report["checks"]["unit_slot_coverage"]["slots_expected"] == 24


def test_audit_passes_with_abort_on_miss() -> None:
    scheduler = RMScheduler({"abort_on_miss": True})
    events, timeline = _run(scheduler, [Task("A", 2, 10, 3), Task("B", 3, 5)], 10)
    report = build_audit_report(events, timeline=timeline, horizon=10)
    assert report["status"] == "pass"
    assert report["checks"]["deadline_miss_consistency"]["aborted_jobs"] == 1


def test_audit_flags_timeline_that_disagrees_with_events() -> None:
    events, timeline = _run(EDFScheduler(), [Task("A", 1, 4), Task("B", 2, 5)], 20)
    tampered = list(timeline)
    tampered[0] = "B" if tampered[0] != "B" else IDLE
    report = build_audit_report(events, timeline=tampered, horizon=20)
    assert report["status"] == "fail"
    assert "timeline_event_agreement" in _rules(report)


def test_audit_flags_timeline_length_mismatch() -> None:
    events, timeline = _run(EDFScheduler(), [Task("A", 1, 4)], 8)
    report = build_audit_report(events, timeline=timeline[:-1], horizon=8)
    assert report["status"] == "fail"
    assert "timeline_length" in _rules(report)


def test_audit_flags_duplicate_slot_and_over_budget() -> None:
    events, _ = _run(RMScheduler(), [Task("A", 1, 4)], 4)
    execute = next(event for event in events if event["type"] == "JobExecute")
    events.append(dict(execute))
    report = build_audit_report(events, horizon=4)
    assert report["status"] == "fail"
    assert {"unit_slot_coverage", "execution_budget"} <= _rules(report)
    sample = report["issues"][0]["samples"][0]
    assert sample == {"time": 0, "count": 2}


def test_audit_flags_miss_on_completed_job() -> None:
    events, _ = _run(RMScheduler(), [Task("A", 1, 4)], 4)
    events.append(
        {
            "event_id": "evt-forged",
            "type": "DeadlineMiss",
            "time": 4,
            "task_id": "A",
            "job_id": "A@0",
            "payload": {"abort_on_miss": False},
        }
    )
    report = build_audit_report(events, horizon=4)
    assert report["status"] == "fail"
    assert _rules(report) == {"deadline_miss_consistency"}
    assert report["issues"][0]["samples"][0]["reason"] == "already_completed"
