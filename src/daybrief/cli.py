"""
Command line entry point.

Examples:
  daybrief events --dry-run
  daybrief tv --env-file ~/.config/daybrief.env
  daybrief optimize --max-evaluations 20 --batch-size 5
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from datetime import datetime
from typing import Mapping, Sequence

from dotenv import load_dotenv

from daybrief.config import OptimizerConfig, Settings
from daybrief.digests import JOBS, JobContext
from daybrief.digests import tv
from daybrief.errors import describe_error
from daybrief.llm import LiteLLMOracle, Oracle
from daybrief.logging.logger import LoggerProtocol, LogLevel, StdOutLogger
from daybrief.logging.sink import FileRecordSink
from daybrief.optimizer import NoEvaluations, Orchestrator


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--dry-run", action="store_true", help="Print the result instead of sending it")
    common.add_argument("--env-file", default=".env", help="dotenv file to load before reading settings")
    common.add_argument("--verbose", action="store_true", help="Show debug output")

    parser = argparse.ArgumentParser(
        prog="daybrief",
        description="Model-generated email and SMS briefings, plus a prompt optimizer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("events", parents=[common], help="Ashford events for the next 3 days (email)")
    sub.add_parser("games", parents=[common], help="Meta Quest games newsletter (email)")
    sub.add_parser("tv", parents=[common], help="UK TV & entertainment guide (email)")
    sub.add_parser("shift", parents=[common], help="Night-shift motivational message (SMS)")
    opt = sub.add_parser("optimize", parents=[common], help="Hill-climb the TV guide prompt")
    opt.add_argument(
        "--max-evaluations",
        type=_positive_int,
        default=OptimizerConfig().max_evaluations,
        help="Evaluation budget (default: %(default)s)",
    )
    opt.add_argument(
        "--batch-size",
        type=_positive_int,
        default=OptimizerConfig().batch_size,
        help="Concurrent evaluations per round (default: %(default)s)",
    )
    return parser


def make_sink(settings: Settings, logger: LoggerProtocol) -> FileRecordSink:
    open_command = None
    if settings.open_records:
        open_command = ["open"] if sys.platform == "darwin" else ["xdg-open"]
    return FileRecordSink(settings.record_dir, open_command=open_command, logger=logger)


async def run_optimize(
    args: argparse.Namespace,
    settings: Settings,
    oracle: Oracle,
    logger: LoggerProtocol,
    now: datetime | None = None,
) -> int:
    now = now or datetime.now()
    config = OptimizerConfig(max_evaluations=args.max_evaluations, batch_size=args.batch_size)
    orchestrator = Orchestrator(
        oracle,
        tv.seed_prompt(now),
        config,
        sink=make_sink(settings, logger),
        logger=logger,
        target=tv.full_date(now),
        record_dir=settings.record_dir,
    )
    outcome = await orchestrator.run(config.max_evaluations)
    if isinstance(outcome, NoEvaluations):
        logger.log(f"❌ Optimization produced no evaluations: {outcome.reason}", LogLevel.ERROR)
        return 1
    print(outcome.report.render())
    return 0


async def run_command(
    args: argparse.Namespace,
    settings: Settings,
    oracle: Oracle,
    logger: LoggerProtocol,
) -> int:
    if args.command == "optimize":
        return await run_optimize(args, settings, oracle, logger)
    ctx = JobContext(
        settings=settings,
        oracle=oracle,
        dry_run=args.dry_run,
        sink=make_sink(settings, logger),
        logger=logger,
    )
    await JOBS[args.command](ctx)
    return 0


def main(
    argv: Sequence[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    oracle: Oracle | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    logger = StdOutLogger(LogLevel.DEBUG if args.verbose else LogLevel.INFO)
    if args.dry_run:
        logger.log("🟢 Running in DRY RUN mode. Nothing will be sent.")

    if environ is None:
        load_dotenv(args.env_file)
        environ = os.environ

    try:
        settings = Settings.from_env(environ)
        if oracle is None:
            settings.require("gemini_api_key")
            oracle = LiteLLMOracle.from_settings(settings, logger=logger)
        return asyncio.run(run_command(args, settings, oracle, logger))
    except Exception as exc:
        notice = describe_error(exc, {"op": args.command})
        logger.log(f"❌ {notice.flash_text()}", LogLevel.ERROR)
        logger.log(notice.debug or repr(exc), LogLevel.DEBUG)
        return 1


if __name__ == "__main__":
    sys.exit(main())
