from __future__ import annotations

import re

from loop_repair.errors import DecodeError
from loop_repair.instructions import Instruction, Opcode, make_instruction
from loop_repair.program import Program

_TOKEN = re.compile(r"\S+")
_INT = re.compile(r"[+-]?[0-9]+")


def parse_instruction(text: str, *, line: int | None = None) -> Instruction:
    tokens = [(m.group(0), m.start() + 1) for m in _TOKEN.finditer(text)]
    if not tokens:
        raise DecodeError("empty instruction", line=line)

    mnemonic, col = tokens[0]
    try:
        opcode = Opcode(mnemonic)
    except ValueError:
        raise DecodeError(f"unrecognized opcode {mnemonic!r}", line=line, col=col) from None

    if len(tokens) < 2:
        raise DecodeError(f"missing operand for {mnemonic!r}", line=line, col=col + len(mnemonic))
    operand, col = tokens[1]
    if not _INT.fullmatch(operand):
        raise DecodeError(f"operand must be a signed integer, got {operand!r}", line=line, col=col)
    if len(tokens) > 2:
        extra, col = tokens[2]
        raise DecodeError(f"unexpected token {extra!r}", line=line, col=col)

    return make_instruction(opcode, int(operand))


def parse_program(src: str) -> Program:
    """Decode one instruction per non-blank line."""
    instructions: list[Instruction] = []
    for lineno, raw in enumerate(src.splitlines(), start=1):
        if not raw.strip():
            continue
        instructions.append(parse_instruction(raw, line=lineno))
    return Program(instructions)


def format_program(program: Program) -> str:
    return "".join(f"{instr}\n" for instr in program)
