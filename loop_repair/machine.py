from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import assert_never

from loop_repair.errors import AddressError, MachineHalted
from loop_repair.instructions import Accumulate, Instruction, Jump, NoOp
from loop_repair.program import Program

logger = logging.getLogger(__name__)


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CYCLE_DETECTED = "cycle_detected"
    ADDRESS_ERROR = "address_error"

    @property
    def terminal(self) -> bool:
        return self is not RunStatus.RUNNING


@dataclass(frozen=True, slots=True)
class RunOutcome:
    status: RunStatus
    accumulator: int
    pointer: int
    steps: int = 0
    visited: int = 0

    @property
    def completed(self) -> bool:
        return self.status == RunStatus.COMPLETED


@dataclass(frozen=True, slots=True)
class TraceEntry:
    pointer: int
    instruction: Instruction
    accumulator: int

    def __str__(self) -> str:
        return f"{self.pointer:>5}  {str(self.instruction):<10} acc={self.accumulator}"


class Machine:
    """Fetch/execute loop over a single Program.

    A Machine is single-use: it starts at pointer 0 with an empty visited
    set, runs to one terminal status, and is then discarded.

    Usage:
        machine = Machine(program)
        outcome = machine.run()
        if outcome.status == RunStatus.CYCLE_DETECTED:
            ...
    """

    def __init__(self, program: Program, *, trace: bool = False) -> None:
        self.program = program
        self.pointer = 0
        self.accumulator = 0
        self.visited: set[int] = set()
        self.steps = 0
        self.status = RunStatus.COMPLETED if len(program) == 0 else RunStatus.RUNNING
        self._trace = trace
        self.trace: list[TraceEntry] = []

    def outcome(self) -> RunOutcome:
        return RunOutcome(
            status=self.status,
            accumulator=self.accumulator,
            pointer=self.pointer,
            steps=self.steps,
            visited=len(self.visited),
        )

    def step(self) -> RunStatus:
        """Execute the instruction at the current pointer. Returns the new status."""
        if self.status.terminal:
            raise MachineHalted(f"machine already stopped: {self.status.value}")

        length = len(self.program)
        pointer = self.pointer
        if not 0 <= pointer < length:
            self.status = RunStatus.ADDRESS_ERROR
            raise AddressError(pointer, length=length)

        instr = self.program[pointer]
        if self._trace:
            self.trace.append(
                TraceEntry(pointer=pointer, instruction=instr, accumulator=self.accumulator)
            )
        self.visited.add(pointer)
        self.steps += 1

        match instr:
            case Accumulate(delta=delta):
                self.accumulator += delta
                self.pointer = pointer + 1
            case NoOp():
                self.pointer = pointer + 1
            case Jump(offset=offset):
                self.pointer = pointer + offset
            case _:
                assert_never(instr)

        if self.pointer == length:
            self.status = RunStatus.COMPLETED
        elif not 0 <= self.pointer < length:
            self.status = RunStatus.ADDRESS_ERROR
        return self.status

    def run(self) -> RunOutcome:
        while self.status == RunStatus.RUNNING:
            # Report before re-executing: state stays at the revisited pointer.
            if self.pointer in self.visited:
                self.status = RunStatus.CYCLE_DETECTED
                break
            self.step()

        if self.status == RunStatus.ADDRESS_ERROR:
            logger.error(
                "pointer left program: pointer=%d length=%d after %d steps",
                self.pointer,
                len(self.program),
                self.steps,
            )
        else:
            logger.debug(
                "run stopped: status=%s accumulator=%d pointer=%d steps=%d",
                self.status.value,
                self.accumulator,
                self.pointer,
                self.steps,
            )
        return self.outcome()
