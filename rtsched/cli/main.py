"""CLI entrypoint for simulation, analysis and validation."""

from __future__ import annotations

import argparse

from rtsched.analysis import analyze_task_set, build_audit_report, build_compare_report, compare_report_to_rows
from rtsched.core import SimEngine
from rtsched.io import (
    ConfigError,
    ConfigLoader,
    ExperimentRunner,
    parse_task_spec,
    read_payload,
    resolve_horizon,
    run_spec,
    write_json,
    write_jsonl,
    write_rows_csv,
    write_timeline_csv,
)
from rtsched.model import ModelSpec, TaskSet
from rtsched.schedulers import available_schedulers, create_scheduler


def _spec_from_args(args: argparse.Namespace) -> ModelSpec:
    """Load ``--config`` or assemble a spec from ``--task`` shorthands."""
    if args.config:
        if args.task:
            raise ConfigError("--config and --task are mutually exclusive")
        return ConfigLoader().load(args.config)
    if not args.task:
        raise ConfigError("either --config or at least one --task is required")
    tasks = TaskSet(parse_task_spec(text) for text in args.task)
    payload = {
        "version": ConfigLoader.SUPPORTED_VERSION,
        "tasks": [
            {
                "id": task.id,
                "execution_time": task.execution_time,
                "period": task.period,
                "deadline": task.deadline,
            }
            for task in tasks
        ],
        "scheduler": {"name": args.scheduler or "rm", "params": {}},
    }
    return ConfigLoader().load_data(payload)


def cmd_validate(args: argparse.Namespace) -> int:
    loader = ConfigLoader()
    try:
        spec = loader.load(args.config)
        # Scheduler resolution must pass during validate.
        SimEngine(create_scheduler(spec.scheduler.name, spec.scheduler.params))
    except (ConfigError, ValueError) as exc:
        print(f"[ERROR] {args.config}: {exc}")
        return 1
    print("[OK] config validation passed")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    if args.until is not None and args.until <= 0:
        print("[ERROR] --until must be > 0")
        return 1
    try:
        spec = _spec_from_args(args)
        engine = run_spec(spec, scheduler_name=args.scheduler, until=args.until)
    except (ConfigError, ValueError) as exc:
        print(f"[ERROR] {exc}")
        return 1

    result = engine.result()
    events = [event.model_dump(mode="json") for event in engine.events]
    metrics = engine.metric_report()

    events_out = args.events_out or "artifacts/events.jsonl"
    metrics_out = args.metrics_out or "artifacts/metrics.json"
    write_jsonl(events_out, events)
    write_json(metrics_out, metrics)
    if args.result_out:
        write_json(args.result_out, result.model_dump(mode="json"))
    if args.timeline_csv_out:
        write_timeline_csv(args.timeline_csv_out, result.timeline)
    if args.print_timeline:
        print(" ".join(result.timeline))
        for message in result.miss_messages():
            print(message)
    if args.audit_out:
        audit_report = build_audit_report(
            events,
            timeline=result.timeline,
            horizon=result.horizon,
            scheduler_name=result.scheduler,
        )
        write_json(args.audit_out, audit_report)
        if audit_report["status"] != "pass":
            print(f"[ERROR] simulation audit failed, report={args.audit_out}")
            return 2

    print(
        f"[OK] simulation completed, scheduler={result.scheduler} ({engine.scheduler.display_name}), "
        f"horizon={result.horizon}, misses={result.miss_count}, events={len(events)}, metrics={metrics_out}"
    )
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    try:
        spec = _spec_from_args(args)
    except (ConfigError, ValueError) as exc:
        print(f"[ERROR] {exc}")
        return 1

    report = analyze_task_set(spec.build_task_set())
    report["horizon"] = resolve_horizon(spec)
    if args.out_json:
        write_json(args.out_json, report)

    bound = report["rms_bound"]
    print(
        "[OK] analysis completed, "
        f"tasks={report['task_count']}, utilization={report['total_utilization']:.4f}, "
        f"rms_bound={bound:.4f}, rms_schedulable={report['rms_schedulable']}, "
        f"edf_schedulable={report['edf_schedulable']}, hyperperiod={report['hyperperiod']}"
    )
    return 0


def cmd_batch_run(args: argparse.Namespace) -> int:
    runner = ExperimentRunner()
    try:
        summary = runner.run_batch(
            args.batch_config,
            output_dir=args.output_dir,
            summary_csv=args.summary_csv,
            summary_json=args.summary_json,
        )
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    print(
        "[OK] batch simulation completed, "
        f"runs={summary.total_runs}, success={summary.succeeded_runs}, failed={summary.failed_runs}, "
        f"csv={summary.summary_csv}, json={summary.summary_json}"
    )
    if args.strict_fail_on_error and summary.failed_runs > 0:
        print("[ERROR] batch simulation contains failed runs in strict mode")
        return 2
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    try:
        left_metrics = read_payload(args.left_metrics)
        right_metrics = read_payload(args.right_metrics)
    except ConfigError as exc:
        print(f"[ERROR] {exc}")
        return 1

    report = build_compare_report(
        left_metrics,
        right_metrics,
        left_label=args.left_label or "left",
        right_label=args.right_label or "right",
    )
    if args.out_json:
        write_json(args.out_json, report)
    if args.out_csv:
        write_rows_csv(args.out_csv, compare_report_to_rows(report))

    print(
        "[OK] metrics compare completed, "
        f"left={args.left_metrics}, right={args.right_metrics}, "
        f"json={args.out_json or '-'}, csv={args.out_csv or '-'}"
    )
    return 0


def _add_task_source_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", default=None, help="path to config YAML/JSON")
    parser.add_argument(
        "-t",
        "--task",
        action="append",
        default=[],
        help="inline task as ID:C:T[:D], repeatable (used when --config is absent)",
    )
    parser.add_argument(
        "-s",
        "--scheduler",
        default=None,
        choices=available_schedulers(),
        help="override scheduler name",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rtsched", description="Real-time scheduling simulation CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="validate config file")
    validate_parser.add_argument("-c", "--config", required=True, help="path to config YAML/JSON")
    validate_parser.set_defaults(func=cmd_validate)

    run_parser = subparsers.add_parser("run", help="run simulation")
    _add_task_source_args(run_parser)
    run_parser.add_argument("--until", type=int, default=None, help="override simulation horizon")
    run_parser.add_argument("--events-out", default=None, help="path to write JSONL events")
    run_parser.add_argument("--metrics-out", default=None, help="path to write metric JSON")
    run_parser.add_argument("--result-out", default=None, help="path to write schedule result JSON")
    run_parser.add_argument("--timeline-csv-out", default=None, help="path to write per-unit timeline CSV")
    run_parser.add_argument("--audit-out", default=None, help="path to write audit report JSON")
    run_parser.add_argument("--print-timeline", action="store_true", help="print timeline and misses")
    run_parser.set_defaults(func=cmd_run)

    analyze_parser = subparsers.add_parser("analyze", help="utilization-based schedulability check")
    _add_task_source_args(analyze_parser)
    analyze_parser.add_argument("--out-json", default=None, help="analysis report JSON path")
    analyze_parser.set_defaults(func=cmd_analyze)

    batch_parser = subparsers.add_parser("batch-run", help="run matrix experiments")
    batch_parser.add_argument("-b", "--batch-config", required=True, help="path to batch config YAML/JSON")
    batch_parser.add_argument("--output-dir", default=None, help="batch output directory")
    batch_parser.add_argument("--summary-csv", default=None, help="summary CSV output path")
    batch_parser.add_argument("--summary-json", default=None, help="summary JSON output path")
    batch_parser.add_argument(
        "--strict-fail-on-error",
        action="store_true",
        help="return non-zero when any batch run fails",
    )
    batch_parser.set_defaults(func=cmd_batch_run)

    compare_parser = subparsers.add_parser("compare", help="compare two metrics json files")
    compare_parser.add_argument("--left-metrics", required=True, help="left metrics JSON path")
    compare_parser.add_argument("--right-metrics", required=True, help="right metrics JSON path")
    compare_parser.add_argument("--left-label", default="left", help="left side label")
    compare_parser.add_argument("--right-label", default="right", help="right side label")
    compare_parser.add_argument("--out-json", default=None, help="compare report JSON path")
    compare_parser.add_argument("--out-csv", default=None, help="compare rows CSV path")
    compare_parser.set_defaults(func=cmd_compare)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
