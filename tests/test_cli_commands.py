from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from rtsched.cli.main import main


EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


def test_cli_validate_ok(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["validate", "-c", str(EXAMPLES / "edf_feasible.yaml")])
    assert code == 0
    assert "[OK] config validation passed" in capsys.readouterr().out


def test_cli_validate_returns_error_when_config_missing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["validate", "-c", str(tmp_path / "missing.yaml")])
    assert code == 1
    assert "[ERROR]" in capsys.readouterr().out


def test_cli_validate_rejects_unknown_scheduler(tmp_path: Path) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text(
        (EXAMPLES / "single_task.yaml").read_text(encoding="utf-8").replace("name: rm", "name: lottery"),
        encoding="utf-8",
    )
    assert main(["validate", "-c", str(config)]) == 1


def test_cli_run_outputs(tmp_path: Path) -> None:
    events_out = tmp_path / "events.jsonl"
    metrics_out = tmp_path / "metrics.json"
    result_out = tmp_path / "result.json"
    timeline_out = tmp_path / "timeline.csv"
    audit_out = tmp_path / "audit.json"

    code = main(
        [
            "run",
            "-c",
            str(EXAMPLES / "rm_overload.yaml"),
            "--events-out",
            str(events_out),
            "--metrics-out",
            str(metrics_out),
            "--result-out",
            str(result_out),
            "--timeline-csv-out",
            str(timeline_out),
            "--audit-out",
            str(audit_out),
        ]
    )
    assert code == 0

    first_event = json.loads(events_out.read_text(encoding="utf-8").splitlines()[0])
    assert first_event["type"] == "JobReleased"
    metrics = json.loads(metrics_out.read_text(encoding="utf-8"))
    assert metrics["deadline_miss_count"] == 3

    result = json.loads(result_out.read_text(encoding="utf-8"))
    assert result["scheduler"] == "rm"
    assert result["horizon"] == 24
    assert len(result["timeline"]) == 24
    assert [miss["time"] for miss in result["missed_deadlines"]] == [6, 12, 18]

    with timeline_out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 24
    assert rows[3] == {"time": "3", "task_id": "B"}

    audit = json.loads(audit_out.read_text(encoding="utf-8"))
    assert audit["status"] == "pass"


def test_cli_run_scheduler_override_and_until(tmp_path: Path) -> None:
    result_out = tmp_path / "result.json"
    code = main(
        [
            "run",
            "-c",
            str(EXAMPLES / "rm_overload.yaml"),
            "--scheduler",
            "edf",
            "--until",
            "5",
            "--events-out",
            str(tmp_path / "events.jsonl"),
            "--metrics-out",
            str(tmp_path / "metrics.json"),
            "--result-out",
            str(result_out),
        ]
    )
    assert code == 0
    result = json.loads(result_out.read_text(encoding="utf-8"))
    assert result["scheduler"] == "edf"
    assert len(result["timeline"]) == 5


def test_cli_run_inline_tasks_prints_timeline(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        [
            "run",
            "--task",
            "A:2:5:5",
            "--until",
            "10",
            "--print-timeline",
            "--events-out",
            str(tmp_path / "events.jsonl"),
            "--metrics-out",
            str(tmp_path / "metrics.json"),
        ]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "A A IDLE IDLE IDLE A A IDLE IDLE IDLE" in out
    assert "misses=0" in out
    assert "scheduler=rm (Rate Monotonic Scheduling (RMS))" in out


def test_cli_run_without_tasks_fails(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["run"]) == 1
    assert "either --config or at least one --task" in capsys.readouterr().out


def test_cli_run_rejects_config_combined_with_inline_tasks(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["run", "-c", str(EXAMPLES / "single_task.yaml"), "--task", "B:1:4"])
    assert code == 1
    assert "--config and --task are mutually exclusive" in capsys.readouterr().out
    assert main(["analyze", "-c", str(EXAMPLES / "single_task.yaml"), "-t", "B:1:4"]) == 1


def test_cli_run_rejects_bad_inline_task_and_until() -> None:
    assert main(["run", "--task", "A:5:4"]) == 1
    assert main(["run", "--task", "A:1:4", "--task", "A:1:8"]) == 1
    assert main(["run", "-c", str(EXAMPLES / "single_task.yaml"), "--until", "0"]) == 1


def test_cli_analyze_outputs_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out_json = tmp_path / "analysis.json"
    code = main(["analyze", "-c", str(EXAMPLES / "edf_feasible.yaml"), "--out-json", str(out_json)])
    assert code == 0
    report = json.loads(out_json.read_text(encoding="utf-8"))
    assert report["total_utilization"] == pytest.approx(0.75)
    assert report["rms_schedulable"] is True
    assert report["horizon"] == 20
    assert "rms_schedulable=True" in capsys.readouterr().out


def test_cli_compare_outputs_json_and_csv(tmp_path: Path) -> None:
    rm_metrics = tmp_path / "rm.json"
    edf_metrics = tmp_path / "edf.json"
    for name, path in (("rm", rm_metrics), ("edf", edf_metrics)):
        code = main(
            [
                "run",
                "--task",
                "A:2:5",
                "--task",
                "B:4:7",
                "--scheduler",
                name,
                "--until",
                "35",
                "--events-out",
                str(tmp_path / f"{name}.jsonl"),
                "--metrics-out",
                str(path),
            ]
        )
        assert code == 0

    out_json = tmp_path / "compare.json"
    out_csv = tmp_path / "compare.csv"
    code = main(
        [
            "compare",
            "--left-metrics",
            str(rm_metrics),
            "--right-metrics",
            str(edf_metrics),
            "--left-label",
            "rm",
            "--right-label",
            "edf",
            "--out-json",
            str(out_json),
            "--out-csv",
            str(out_csv),
        ]
    )
    assert code == 0
    report = json.loads(out_json.read_text(encoding="utf-8"))
    misses = next(row for row in report["scalar_metrics"] if row["metric"] == "deadline_miss_count")
    assert misses["left"] > 0
    assert misses["right"] == 0
    assert out_csv.read_text(encoding="utf-8").startswith("category,")


def test_cli_compare_missing_file(tmp_path: Path) -> None:
    code = main(
        [
            "compare",
            "--left-metrics",
            str(tmp_path / "nope.json"),
            "--right-metrics",
            str(tmp_path / "nope.json"),
        ]
    )
    assert code == 1


def test_cli_batch_run_outputs_summary(tmp_path: Path) -> None:
    base_config = tmp_path / "base.yaml"
    base_config.write_text((EXAMPLES / "edf_feasible.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    batch_config = tmp_path / "batch.yaml"
    batch_config.write_text(
        """
version: "0.2"
base_config: "base.yaml"
output_dir: "out"
schedulers: ["edf", "rm"]
horizons: [10, 20]
""".strip(),
        encoding="utf-8",
    )

    code = main(["batch-run", "-b", str(batch_config)])
    assert code == 0

    payload = json.loads((tmp_path / "out" / "summary.json").read_text(encoding="utf-8"))
    assert (tmp_path / "out" / "summary.csv").exists()
    assert payload["total_runs"] == 4
    assert payload["succeeded_runs"] == 4
    assert payload["failed_runs"] == 0
    assert {(run["scheduler"], run["horizon"]) for run in payload["runs"]} == {
        ("edf", 10),
        ("edf", 20),
        ("rm", 10),
        ("rm", 20),
    }
    assert Path(payload["runs"][0]["result_path"]).exists()


def test_cli_batch_run_strict_mode_returns_non_zero_on_failed_runs(tmp_path: Path) -> None:
    base_config = tmp_path / "base.yaml"
    base_config.write_text((EXAMPLES / "edf_feasible.yaml").read_text(encoding="utf-8"), encoding="utf-8")
    batch_config = tmp_path / "batch.yaml"
    batch_config.write_text(
        """
version: "0.2"
base_config: "base.yaml"
output_dir: "out"
task_variants:
  - {}
  - {A: {execution_time: 5}}
""".strip(),
        encoding="utf-8",
    )

    code = main(["batch-run", "-b", str(batch_config), "--strict-fail-on-error"])
    assert code == 2

    payload = json.loads((tmp_path / "out" / "summary.json").read_text(encoding="utf-8"))
    assert payload["total_runs"] == 2
    assert payload["succeeded_runs"] == 1
    assert payload["failed_runs"] == 1
    failed = payload["runs"][1]
    assert failed["overrides"] == "A.execution_time=5"
    assert "exceeds period" in failed["error"]


def test_cli_batch_run_missing_base_config(tmp_path: Path) -> None:
    batch_config = tmp_path / "batch.yaml"
    batch_config.write_text('version: "0.2"\nschedulers: [rm]\n', encoding="utf-8")
    assert main(["batch-run", "-b", str(batch_config)]) == 1


def test_cli_batch_run_shipped_example(tmp_path: Path) -> None:
    code = main(["batch-run", "-b", str(EXAMPLES / "batch_rm_vs_edf.yaml"), "--output-dir", str(tmp_path)])
    assert code == 0
    payload = json.loads((tmp_path / "summary.json").read_text(encoding="utf-8"))
    assert payload["total_runs"] == 8
    assert payload["failed_runs"] == 0
