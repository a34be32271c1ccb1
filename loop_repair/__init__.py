from __future__ import annotations

from loop_repair.api import repair_and_run, repair_source, run_once, run_source
from loop_repair.errors import (
    AddressError,
    DecodeError,
    LoopRepairError,
    MachineHalted,
    SuiteError,
)
from loop_repair.instructions import Accumulate, Instruction, Jump, NoOp, Opcode, flip
from loop_repair.machine import Machine, RunOutcome, RunStatus, TraceEntry
from loop_repair.parser import format_program, parse_instruction, parse_program
from loop_repair.program import Patch, Program
from loop_repair.repair import RepairOutcome, RepairSearch, RepairSettings, RepairStatus

__all__ = [
    "__version__",
    # API
    "run_once",
    "repair_and_run",
    "run_source",
    "repair_source",
    # Instructions
    "Opcode",
    "Instruction",
    "Accumulate",
    "Jump",
    "NoOp",
    "flip",
    # Program store
    "Program",
    "Patch",
    # Machine
    "Machine",
    "RunOutcome",
    "RunStatus",
    "TraceEntry",
    # Repair
    "RepairSearch",
    "RepairSettings",
    "RepairOutcome",
    "RepairStatus",
    # Decoding
    "parse_program",
    "parse_instruction",
    "format_program",
    # Errors
    "LoopRepairError",
    "DecodeError",
    "AddressError",
    "MachineHalted",
    "SuiteError",
]

__version__ = "0.1.0"
