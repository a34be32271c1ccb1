from __future__ import annotations

from loop_repair.instructions import Accumulate, Jump, NoOp
from loop_repair.program import Program

SAMPLE_SOURCE = """\
nop +0
acc +1
jmp +4
acc +3
jmp -3
acc -99
acc +1
jmp -4
acc +6
"""


def sample_program() -> Program:
    return Program(
        [
            NoOp(0),
            Accumulate(1),
            Jump(4),
            Accumulate(3),
            Jump(-3),
            Accumulate(-99),
            Accumulate(1),
            Jump(-4),
            Accumulate(6),
        ]
    )


def unfixable_program() -> Program:
    # Both jumps loop back on themselves whichever one is flipped.
    return Program([Jump(0), Jump(-1)])
