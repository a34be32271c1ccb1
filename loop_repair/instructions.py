from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias


class Opcode(str, Enum):
    ACCUMULATE = "acc"
    JUMP = "jmp"
    NOOP = "nop"


@dataclass(frozen=True, slots=True)
class Accumulate:
    delta: int

    @property
    def opcode(self) -> Opcode:
        return Opcode.ACCUMULATE

    @property
    def arg(self) -> int:
        return self.delta

    def __str__(self) -> str:
        return f"{self.opcode.value} {self.delta:+d}"


@dataclass(frozen=True, slots=True)
class Jump:
    offset: int

    @property
    def opcode(self) -> Opcode:
        return Opcode.JUMP

    @property
    def arg(self) -> int:
        return self.offset

    def __str__(self) -> str:
        return f"{self.opcode.value} {self.offset:+d}"


@dataclass(frozen=True, slots=True)
class NoOp:
    offset: int

    @property
    def opcode(self) -> Opcode:
        return Opcode.NOOP

    @property
    def arg(self) -> int:
        return self.offset

    def __str__(self) -> str:
        return f"{self.opcode.value} {self.offset:+d}"


Instruction: TypeAlias = Accumulate | Jump | NoOp

INSTRUCTION_TYPES: tuple[type, ...] = (Accumulate, Jump, NoOp)


def make_instruction(opcode: Opcode, arg: int) -> Instruction:
    if opcode is Opcode.ACCUMULATE:
        return Accumulate(arg)
    if opcode is Opcode.JUMP:
        return Jump(arg)
    if opcode is Opcode.NOOP:
        return NoOp(arg)
    raise ValueError(f"unknown opcode: {opcode!r}")


def flip(instr: Instruction) -> Instruction | None:
    """Swap Jump and NoOp, keeping the operand. Accumulate has no flip."""
    match instr:
        case Jump(offset=offset):
            return NoOp(offset)
        case NoOp(offset=offset):
            return Jump(offset)
        case Accumulate():
            return None
