from __future__ import annotations

from loop_repair.machine import Machine, RunOutcome
from loop_repair.parser import parse_program
from loop_repair.program import Program
from loop_repair.repair import RepairOutcome, RepairSettings, repair_and_run

__all__ = ["repair_and_run", "repair_source", "run_once", "run_source"]


def run_once(program: Program) -> RunOutcome:
    return Machine(program).run()


def run_source(*, src: str) -> RunOutcome:
    return run_once(parse_program(src))


def repair_source(*, src: str, settings: RepairSettings | None = None) -> RepairOutcome:
    return repair_and_run(parse_program(src), settings)
