"""
CLI do Report DataFlow.

Subcomandos:
    report-dataflow sheets WORKBOOK [--pattern REGEX]
        lista as planilhas (períodos) do workbook, uma por linha

    report-dataflow run --config config.defaults.yaml [--local config.local.yaml]
                        [--run-dir runs/latest]
                        [--category Europe | --each Europe Asia ...]
        executa o pipeline; com --each, um run por categoria em
        <run-dir>/<categoria>

Códigos de saída: 0 sucesso, 1 run com Step falho, 2 erro de uso/config.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from report_dataflow import __version__
from report_dataflow.core.config.errors import ConfigError
from report_dataflow.core.exceptions import ReportException
from report_dataflow.runner import ReportRun, load_run_config, run_for_each, run_report
from report_dataflow.workbook.reader import list_sheets


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="report-dataflow",
        description="Reproducible workbook-to-report pipeline.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p_sheets = sub.add_parser("sheets", help="list workbook sheets")
    p_sheets.add_argument("workbook", type=Path)
    p_sheets.add_argument("--pattern", default=None, help="regex (full match) to select sheets")

    p_run = sub.add_parser("run", help="run the pipeline")
    p_run.add_argument("--config", required=True, type=Path, help="defaults config (YAML/JSON)")
    p_run.add_argument("--local", default=None, type=Path, help="optional local overrides")
    p_run.add_argument("--run-dir", default=Path("runs") / "latest", type=Path)
    p_run.add_argument("--run-id", default=None)
    group = p_run.add_mutually_exclusive_group()
    group.add_argument("--category", default=None, help="restrict change tables to one category")
    group.add_argument("--each", nargs="+", default=None, metavar="CATEGORY", help="one run per category")

    return parser


def _print_run(label: str, run: ReportRun) -> None:
    status = "ok" if run.ok else "FAILED"
    print(f"[{status}] {label}: {run.run_dir}")
    for sid in run.result.failed_steps():
        error = (run.result.steps[sid].payload or {}).get("error") or {}
        print(f"  {sid}: {error.get('type', 'error')}: {error.get('message', run.result.steps[sid].summary)}")


def _cmd_sheets(args: argparse.Namespace) -> int:
    for name in list_sheets(args.workbook, pattern=args.pattern):
        print(name)
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    config = load_run_config(args.config, args.local)

    if args.each:
        runs = run_for_each(config=config, run_root=args.run_dir, values=args.each)
        for value, run in runs.items():
            _print_run(str(value), run)
        return 0 if all(r.ok for r in runs.values()) else 1

    params = {"category": args.category} if args.category is not None else None
    run = run_report(config=config, run_dir=args.run_dir, run_id=args.run_id, params=params)
    _print_run(run.ctx.run_id, run)
    return 0 if run.ok else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    try:
        if args.command == "sheets":
            return _cmd_sheets(args)
        return _cmd_run(args)
    except ReportException as e:
        print(f"error: {e.code}: {e.message}", file=sys.stderr)
        return 1
    except (ConfigError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
