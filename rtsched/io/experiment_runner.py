"""Batch comparison of schedulers, miss policies and task variants over one task set."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rtsched.analysis import is_schedulable_edf, is_schedulable_rms, total_utilization
from rtsched.core import SimEngine
from rtsched.model import BatchSpec, ModelSpec, TaskOverride
from rtsched.schedulers import create_scheduler

from .artifacts import write_json, write_jsonl, write_rows_csv
from .loader import ConfigError, ConfigLoader, read_payload, resolve_horizon


@dataclass(slots=True)
class BatchRunSummary:
    summary_csv: Path
    summary_json: Path
    total_runs: int
    succeeded_runs: int
    failed_runs: int


@dataclass(slots=True)
class BatchCase:
    run_id: str
    scheduler: str
    miss_policy: str
    abort_on_miss: bool
    horizon: int | None = None
    overrides: dict[str, TaskOverride] = field(default_factory=dict)

    def label(self) -> str:
        """Render overrides as ``A.execution_time=2;B.period=8``."""
        return ";".join(
            f"{task_id}.{key}={value}"
            for task_id, override in self.overrides.items()
            for key, value in override.model_dump(exclude_none=True).items()
        )


def run_spec(
    spec: ModelSpec,
    *,
    scheduler_name: str | None = None,
    until: int | None = None,
) -> SimEngine:
    """Build an engine for ``spec`` and run it to the resolved horizon."""
    name = scheduler_name or spec.scheduler.name
    scheduler = create_scheduler(name, spec.scheduler.params)
    engine = SimEngine(scheduler, seed=spec.sim.seed)
    engine.build(spec.build_task_set().tasks, resolve_horizon(spec, until))
    engine.run()
    return engine


def apply_case(base: ModelSpec, case: BatchCase) -> ModelSpec:
    """Return a new spec with the scheduler, policy, horizon and task overrides of ``case``."""
    payload = base.model_dump(mode="json")
    payload["scheduler"] = {
        "name": case.scheduler,
        "params": {
            **base.scheduler.params,
            "miss_policy": case.miss_policy,
            "abort_on_miss": case.abort_on_miss,
        },
    }
    if case.horizon is not None:
        payload["sim"]["horizon"] = case.horizon

    for task in payload["tasks"]:
        override = case.overrides.get(task["id"])
        if override is None:
            continue
        changes = override.model_dump(exclude_none=True)
        # An implicit deadline (D == T) follows a period change.
        if "period" in changes and "deadline" not in changes and task["deadline"] == task["period"]:
            changes["deadline"] = changes["period"]
        task.update(changes)

    try:
        return ModelSpec.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


class ExperimentRunner:
    """Run the cross product of a batch matrix and persist per-run artifacts."""

    SUPPORTED_VERSION = "0.2"

    def __init__(self, loader: ConfigLoader | None = None) -> None:
        self._loader = loader or ConfigLoader()

    def load_batch(self, path: str | Path) -> BatchSpec:
        payload = read_payload(path)
        version = str(payload.get("version", self.SUPPORTED_VERSION))
        if version != self.SUPPORTED_VERSION:
            raise ConfigError(f"unsupported batch version '{version}'")
        try:
            return BatchSpec.model_validate({**payload, "version": version})
        except ValidationError as exc:
            raise ConfigError(f"invalid batch config: {exc}") from exc

    def expand(self, batch: BatchSpec, base: ModelSpec) -> list[BatchCase]:
        known_ids = {task.id for task in base.tasks}
        for variant in batch.task_variants:
            unknown = sorted(set(variant) - known_ids)
            if unknown:
                raise ConfigError(f"task_variants reference unknown task id: {', '.join(unknown)}")

        params = base.scheduler.params
        axes = product(
            batch.schedulers or [base.scheduler.name],
            batch.miss_policies or [str(params.get("miss_policy", "deadline"))],
            batch.abort_on_miss or [bool(params.get("abort_on_miss", False))],
            batch.horizons or [None],
            batch.task_variants or [{}],
        )
        return [
            BatchCase(
                run_id=f"run_{idx:03d}",
                scheduler=scheduler,
                miss_policy=miss_policy,
                abort_on_miss=abort_on_miss,
                horizon=horizon,
                overrides=dict(overrides),
            )
            for idx, (scheduler, miss_policy, abort_on_miss, horizon, overrides) in enumerate(axes)
        ]

    def run_batch(
        self,
        batch_config_path: str,
        *,
        output_dir: str | None = None,
        summary_csv: str | None = None,
        summary_json: str | None = None,
    ) -> BatchRunSummary:
        batch_path = Path(batch_config_path)
        batch = self.load_batch(batch_path)
        base_path = (batch_path.parent / batch.base_config).resolve()
        base = self._loader.load(str(base_path))
        cases = self.expand(batch, base)

        if output_dir:
            run_root = Path(output_dir)
        elif batch.output_dir:
            run_root = (batch_path.parent / batch.output_dir).resolve()
        else:
            run_root = (batch_path.parent / "artifacts" / "batch").resolve()

        rows = [self._run_case(base, case, run_root / case.run_id) for case in cases]
        succeeded = sum(1 for row in rows if row["status"] == "ok")

        summary_csv_path = write_rows_csv(Path(summary_csv) if summary_csv else run_root / "summary.csv", rows)
        summary_json_path = write_json(
            Path(summary_json) if summary_json else run_root / "summary.json",
            {
                "version": self.SUPPORTED_VERSION,
                "base_config": str(base_path),
                "total_runs": len(rows),
                "succeeded_runs": succeeded,
                "failed_runs": len(rows) - succeeded,
                "runs": rows,
            },
        )
        return BatchRunSummary(
            summary_csv=summary_csv_path,
            summary_json=summary_json_path,
            total_runs=len(rows),
            succeeded_runs=succeeded,
            failed_runs=len(rows) - succeeded,
        )

    def _run_case(self, base: ModelSpec, case: BatchCase, run_dir: Path) -> dict[str, Any]:
        row: dict[str, Any] = {
            "run_id": case.run_id,
            "scheduler": case.scheduler,
            "miss_policy": case.miss_policy,
            "abort_on_miss": case.abort_on_miss,
            "horizon": case.horizon,
            "overrides": case.label(),
        }
        try:
            spec = apply_case(base, case)
            engine = run_spec(spec)
        except (ConfigError, ValueError) as exc:
            row["status"] = "error"
            row["error"] = str(exc)
            return row

        result = engine.result()
        metrics = engine.metric_report()
        tasks = spec.build_task_set().tasks
        write_jsonl(run_dir / "events.jsonl", [event.model_dump(mode="json") for event in engine.events])
        write_json(run_dir / "metrics.json", metrics)
        result_path = run_dir / "result.json"
        result_path.write_text(result.to_json(), encoding="utf-8")

        row.update(
            {
                "status": "ok",
                "horizon": result.horizon,
                "utilization": round(total_utilization(tasks), 6),
                "rms_schedulable": is_schedulable_rms(tasks),
                "edf_schedulable": is_schedulable_edf(tasks),
                "misses": result.miss_count,
                "feasible": result.is_feasible,
                "busy_ratio": round(result.busy_ratio, 6),
                "preempt_count": metrics["preempt_count"],
                "avg_response_time": metrics["avg_response_time"],
                "result_path": str(result_path),
            }
        )
        return row
