"""Post-simulation audit checks for event stream and timeline correctness."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Sequence

from rtsched.model import IDLE


SLOT_EVENT_TYPES = {"JobExecute", "Idle"}


def _check_slot_coverage(
    events: list[dict[str, Any]],
    timeline: Sequence[str] | None,
    horizon: int | None,
) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    slots: defaultdict[int, list[dict[str, Any]]] = defaultdict(list)
    for event in events:
        if event.get("type") in SLOT_EVENT_TYPES:
            slots[int(event.get("time", 0))].append(event)

    expected = horizon if horizon is not None else (len(timeline) if timeline is not None else len(slots))
    issues: list[dict[str, Any]] = []

    bad_slots = [
        {"time": time, "count": len(slots.get(time, []))}
        for time in range(expected)
        if len(slots.get(time, [])) != 1
    ]
    extra_slots = sorted(time for time in slots if time < 0 or time >= expected)
    if bad_slots or extra_slots:
        issues.append(
            {
                "rule": "unit_slot_coverage",
                "severity": "error",
                "message": "every time unit must carry exactly one JobExecute or Idle event",
                "samples": bad_slots[:20],
                "out_of_range": extra_slots[:20],
            }
        )

    mismatches: list[dict[str, Any]] = []
    if timeline is not None:
        if horizon is not None and len(timeline) != horizon:
            issues.append(
                {
                    "rule": "timeline_length",
                    "severity": "error",
                    "message": "timeline length must equal horizon",
                    "timeline_length": len(timeline),
                    "horizon": horizon,
                }
            )
        for time, slot in enumerate(timeline):
            slot_events = slots.get(time, [])
            if len(slot_events) != 1:
                continue
            event = slot_events[0]
            observed = IDLE if event.get("type") == "Idle" else event.get("task_id")
            if observed != slot:
                mismatches.append({"time": time, "timeline": slot, "event": observed})
        if mismatches:
            issues.append(
                {
                    "rule": "timeline_event_agreement",
                    "severity": "error",
                    "message": "timeline entries must match the dispatch event stream",
                    "samples": mismatches[:20],
                }
            )

    check = {
        "passed": not issues,
        "slots_expected": expected,
        "timeline_checked": timeline is not None,
    }
    return issues, check


def _check_execution_budget(events: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    budget: dict[str, int] = {}
    executed: defaultdict[str, int] = defaultdict(int)
    samples: list[dict[str, Any]] = []

    for event in events:
        event_type = event.get("type")
        job_id = event.get("job_id")
        payload = event.get("payload", {})
        if not isinstance(payload, dict) or not isinstance(job_id, str):
            continue
        if event_type == "JobReleased":
            budget[job_id] = int(payload.get("execution_time", 0))
            executed[job_id] = 0
        elif event_type == "JobExecute":
            executed[job_id] += 1
            limit = budget.get(job_id)
            remaining = payload.get("remaining")
            if limit is None:
                samples.append({"event_id": event.get("event_id"), "job_id": job_id, "reason": "not_released"})
            elif executed[job_id] > limit:
                samples.append({"event_id": event.get("event_id"), "job_id": job_id, "reason": "over_budget"})
            elif not isinstance(remaining, int) or not 0 <= remaining <= limit:
                samples.append(
                    {
                        "event_id": event.get("event_id"),
                        "job_id": job_id,
                        "reason": "remaining_out_of_range",
                        "remaining": remaining,
                    }
                )

    issues: list[dict[str, Any]] = []
    if samples:
        issues.append(
            {
                "rule": "execution_budget",
                "severity": "error",
                "message": "a job must never execute more units than its execution time",
                "samples": samples[:20],
            }
        )
    return issues, {"passed": not samples, "jobs_checked": len(budget)}


def _check_miss_consistency(events: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    released: set[str] = set()
    completed_at: dict[str, int] = {}
    aborted: set[str] = set()
    samples: list[dict[str, Any]] = []

    for event in events:
        event_type = event.get("type")
        job_id = event.get("job_id")
        if not isinstance(job_id, str):
            continue
        payload = event.get("payload", {})
        if not isinstance(payload, dict):
            payload = {}
        if event_type == "JobReleased":
            released.add(job_id)
        elif event_type == "JobComplete":
            completed_at[job_id] = int(event.get("time", 0))
        elif event_type == "DeadlineMiss":
            if job_id not in released:
                samples.append({"event_id": event.get("event_id"), "job_id": job_id, "reason": "not_released"})
            elif job_id in completed_at:
                samples.append(
                    {
                        "event_id": event.get("event_id"),
                        "job_id": job_id,
                        "reason": "already_completed",
                        "completed_at": completed_at[job_id],
                    }
                )
            if payload.get("abort_on_miss"):
                aborted.add(job_id)
        elif event_type == "JobExecute" and job_id in aborted:
            samples.append({"event_id": event.get("event_id"), "job_id": job_id, "reason": "executed_after_abort"})

    issues: list[dict[str, Any]] = []
    if samples:
        issues.append(
            {
                "rule": "deadline_miss_consistency",
                "severity": "error",
                "message": "deadline misses must refer to released, unfinished jobs",
                "samples": samples[:20],
            }
        )
    return issues, {"passed": not samples, "aborted_jobs": len(aborted)}


def build_audit_report(
    events: list[dict[str, Any]],
    *,
    timeline: Sequence[str] | None = None,
    horizon: int | None = None,
    scheduler_name: str | None = None,
) -> dict[str, Any]:
    issues: list[dict[str, Any]] = []
    checks: dict[str, Any] = {}

    for rule, check in (
        ("unit_slot_coverage", lambda: _check_slot_coverage(events, timeline, horizon)),
        ("execution_budget", lambda: _check_execution_budget(events)),
        ("deadline_miss_consistency", lambda: _check_miss_consistency(events)),
    ):
        rule_issues, summary = check()
        issues.extend(rule_issues)
        checks[rule] = summary

    return {
        "status": "pass" if not issues else "fail",
        "scheduler": scheduler_name,
        "issue_count": len(issues),
        "issues": issues,
        "checks": checks,
    }
