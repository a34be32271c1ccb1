from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from loop_repair.config import LoopRepairSettings, load_settings
from loop_repair.errors import DecodeError, SuiteError
from loop_repair.machine import Machine, RunStatus
from loop_repair.parser import parse_program
from loop_repair.program import Program
from loop_repair.repair import RepairSettings, RepairStatus, repair_and_run
from loop_repair.schemas import RepairReport, RunReport
from loop_repair.suite import check_suite, load_suite

logger = logging.getLogger("loop_repair")

_RUN_EXIT_CODES = {
    RunStatus.COMPLETED: 0,
    RunStatus.CYCLE_DETECTED: 1,
    RunStatus.ADDRESS_ERROR: 2,
}


def _program_path(value: str) -> str:
    if value != "-" and not Path(value).is_file():
        raise argparse.ArgumentTypeError(f"not a file: {value}")
    return value


def _suite_path(value: str) -> Path:
    p = Path(value)
    if not p.is_file():
        raise argparse.ArgumentTypeError(f"not a file: {value}")
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise argparse.ArgumentTypeError(f"suite must be YAML: {value}")
    return p


def _read_program(value: str) -> Program:
    src = sys.stdin.read() if value == "-" else Path(value).read_text(encoding="utf-8")
    return parse_program(src)


def _setup_logging(*, level: str, verbose: int) -> None:
    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _cmd_run(args: argparse.Namespace) -> int:
    program = _read_program(args.path)
    machine = Machine(program, trace=bool(args.trace))
    outcome = machine.run()

    if args.trace:
        for entry in machine.trace:
            print(entry)
    if args.json:
        print(RunReport.from_outcome(outcome).model_dump_json(indent=2))
    elif outcome.status == RunStatus.CYCLE_DETECTED:
        print(f"cycle_detected accumulator={outcome.accumulator} pointer={outcome.pointer}")
    elif outcome.status == RunStatus.ADDRESS_ERROR:
        print(f"address_error accumulator={outcome.accumulator} pointer={outcome.pointer}")
    else:
        print(f"completed accumulator={outcome.accumulator}")
    return _RUN_EXIT_CODES[outcome.status]


def _cmd_repair(args: argparse.Namespace, *, settings: LoopRepairSettings) -> int:
    program = _read_program(args.path)
    repair_settings = RepairSettings(
        max_workers=args.workers if args.workers is not None else settings.max_workers,
        chunk_size=settings.chunk_size,
    )
    outcome = repair_and_run(program, repair_settings)

    if args.json:
        print(RepairReport.from_outcome(outcome).model_dump_json(indent=2))
    elif outcome.status == RepairStatus.COMPLETED:
        if outcome.patch is not None:
            print(f"patch {outcome.patch}")
        print(f"completed accumulator={outcome.accumulator}")
    elif outcome.status == RepairStatus.ADDRESS_ERROR:
        print("address_error")
    else:
        print(f"no_fix_found candidates={outcome.candidates_tried}")

    if outcome.status == RepairStatus.COMPLETED:
        return 0
    if outcome.status == RepairStatus.NO_FIX_FOUND:
        return 1
    return 2


def _cmd_check(args: argparse.Namespace, *, settings: LoopRepairSettings) -> int:
    suite = load_suite(args.suite)
    results = check_suite(suite, settings=settings.repair_settings())

    print(f"Suite {suite.suite_id}: {suite.title}")
    for r in results:
        mark = "PASS" if r.passed else "FAIL"
        print(f"  {mark} {r.case_id}")
        for failure in r.failures:
            print(f"       {failure}")
    failed = sum(1 for r in results if not r.passed)
    print(f"{len(results) - failed}/{len(results)} passed")
    return 0 if failed == 0 else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="loop-repair")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="logging level (default: LOOP_REPAIR_LOG_LEVEL or WARNING)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    run_p = sub.add_parser("run", help="run a program once and report how it stopped")
    run_p.add_argument("path", type=_program_path, help="program file, or - for stdin")
    run_p.add_argument("--trace", action="store_true", help="print every executed instruction")
    run_p.add_argument("--json", action="store_true")

    repair_p = sub.add_parser("repair", help="run a program, fixing one jmp/nop if it loops")
    repair_p.add_argument("path", type=_program_path, help="program file, or - for stdin")
    repair_p.add_argument(
        "--workers",
        type=int,
        default=None,
        help="threads for candidate evaluation (default: LOOP_REPAIR_MAX_WORKERS or 1)",
    )
    repair_p.add_argument("--json", action="store_true")

    check_p = sub.add_parser("check", help="check programs against a YAML suite")
    check_p.add_argument("suite", type=_suite_path)

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    _setup_logging(level=args.log_level or settings.log_level, verbose=args.verbose)
    logger.debug("settings: %s", settings)

    try:
        if args.cmd == "run":
            return _cmd_run(args)
        if args.cmd == "repair":
            return _cmd_repair(args, settings=settings)
        if args.cmd == "check":
            return _cmd_check(args, settings=settings)
    except (DecodeError, SuiteError, OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    raise AssertionError(f"unhandled cmd: {args.cmd}")
