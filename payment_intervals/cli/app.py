from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from payment_intervals.config.loader import (
    DEFAULT_CONFIG_PATH,
    AnalyzerConfig,
    ConfigError,
    apply_env_overrides,
    load_config,
)
from payment_intervals.csvio.reader import MalformedBatchError, inspect_table
from payment_intervals.csvio.source import ReadError, acquire_text
from payment_intervals.logging.init import log_summary, setup_logging
from payment_intervals.models.analysis import AnalysisContext, AnalysisStatus
from payment_intervals.models.filter_criteria import FilterCriteria
from payment_intervals.services.orchestrator import (
    ProcessingError,
    context_from_config,
    process_all,
    scan_csv_files,
)
from payment_intervals.services.pipeline import load_successful_ids
from payment_intervals.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (python-dotenv) and the YAML config
- Resolve inputs: --input files, or every .csv in source_directory
- Apply CLI overrides (statuses, filters, allow-set, export switch)
- Analyze, export, print one line per file and the SUMMARY line

Exit codes:
    0  every file produced results (or there were no files)
    2  at least one file ended empty (no usable rows / no pairs) or failed
    1  fatal startup error (config, missing directory)
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="payment-intervals",
        description="Measure the time between two payment lifecycle statuses in event log CSVs",
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--input", type=Path, nargs="+", help="Event log CSV file(s); default: scan source_directory")
    p.add_argument("--successful", type=Path, help="CSV with a paymentId column of successful payments")
    p.add_argument("--from-status", type=int, help="Status code that starts the interval")
    p.add_argument("--to-status", type=int, help="Status code that ends the interval")
    p.add_argument("--date", help="Keep only results of this date (DD/MM/YYYY)")
    p.add_argument("--terminal-id", help="Keep results whose terminal id contains this text")
    p.add_argument("--payment-id", help="Keep results whose payment id contains this text")
    p.add_argument("--min-seconds", type=int, help="Keep results strictly longer than this many seconds")
    p.add_argument("--only-successful", action="store_true", help="Keep only payments from the successful file")
    p.add_argument("--no-export", action="store_true", help="Do not write export CSV files")
    p.add_argument("--list-dates", action="store_true", help="Print the distinct result dates per file")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _build_context(cfg: AnalyzerConfig, args: argparse.Namespace) -> AnalysisContext:
    context = context_from_config(cfg)
    from_status = args.from_status if args.from_status is not None else context.from_status
    to_status = args.to_status if args.to_status is not None else context.to_status
    base = context.criteria
    criteria = FilterCriteria(
        date=args.date if args.date is not None else base.date,
        terminal_id=args.terminal_id if args.terminal_id is not None else base.terminal_id,
        payment_id=args.payment_id if args.payment_id is not None else base.payment_id,
        time_difference=args.min_seconds if args.min_seconds is not None else base.time_difference,
        only_successful=args.only_successful or base.only_successful,
    )
    return context.with_statuses(from_status, to_status).with_criteria(criteria)


def _inspect_data(files: list[Path]) -> int:
    if not files:
        print("inspect: no .csv files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            columns, sample = inspect_table(acquire_text(f))
        except (ReadError, MalformedBatchError) as e:
            print(f"  read_error: {e}")
            continue
        print(f"  cols={columns}")
        print("  sample_rows=", sample)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    # .env の値を環境変数より優先 (PAYMENT_FROM_STATUS / PAYMENT_TO_STATUS)
    load_dotenv(dotenv_path=Path(".env"), override=True)

    try:
        cfg = apply_env_overrides(load_config(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.no_export:
        cfg = replace(cfg, export=False)

    if args.input:
        files = list(args.input)
    else:
        try:
            files = scan_csv_files(Path(cfg.source_directory))
        except ProcessingError as e:
            logger.error(f"directory not found: {cfg.source_directory} ({e})")
            return EXIT_FATAL
        logger.info(f"Processing files from: {cfg.source_directory}")

    if args.inspect_data:
        return _inspect_data(files)

    context = _build_context(cfg, args)
    if args.successful is not None:
        ids_outcome = load_successful_ids(args.successful)
        if ids_outcome.status is AnalysisStatus.OK:
            context = context.with_successful_ids(ids_outcome.ids)
            logger.info(f"loaded {len(ids_outcome.ids or ())} successful payment id(s)")
        else:
            logger.warning(f"successful payments: {ids_outcome.message}")

    if context.criteria.only_successful and context.successful_ids is None and not cfg.successful_payments_file:
        logger.warning("--only-successful has no effect without a successful payments file")

    logger.debug(f"statuses {context.from_status} -> {context.to_status}, criteria={context.criteria}")

    try:
        result = process_all(cfg, inputs=files, context=context)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if args.list_dates:
        for run in result.file_runs or []:
            logger.info(f"{run.file_name} dates={','.join(run.dates) if run.dates else '-'}")

    summary_line = render_summary_line(result.total_files, result)
    # log_summary が "SUMMARY " を付与するため先頭を除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0 or result.empty_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
