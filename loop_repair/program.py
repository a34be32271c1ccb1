from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from loop_repair.instructions import INSTRUCTION_TYPES, Instruction, flip


class Program:
    """Immutable, index-addressed sequence of instructions.

    Variants for repair are derived with `patched`, which copies the
    instruction tuple and swaps one slot. The original is never touched.
    """

    __slots__ = ("_instructions",)

    def __init__(self, instructions: Iterable[Instruction] = ()) -> None:
        items = tuple(instructions)
        for i, instr in enumerate(items):
            if not isinstance(instr, INSTRUCTION_TYPES):
                raise TypeError(f"program[{i}] is not an instruction: {instr!r}")
        self._instructions: tuple[Instruction, ...] = items

    def __len__(self) -> int:
        return len(self._instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self._instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Program):
            return self._instructions == other._instructions
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._instructions)

    def __repr__(self) -> str:
        return f"Program({list(self._instructions)!r})"

    def patched(self, index: int, instr: Instruction) -> Program:
        if not 0 <= index < len(self._instructions):
            raise IndexError(f"patch index {index} out of range for program of length {len(self)}")
        items = list(self._instructions)
        items[index] = instr
        return Program(items)

    def repair_candidates(self) -> Iterator[Patch]:
        """Yield every Jump/NoOp flip in ascending index order."""
        for index, original in enumerate(self._instructions):
            replacement = flip(original)
            if replacement is not None:
                yield Patch(index=index, original=original, replacement=replacement)


@dataclass(frozen=True, slots=True)
class Patch:
    index: int
    original: Instruction
    replacement: Instruction

    def apply(self, program: Program) -> Program:
        return program.patched(self.index, self.replacement)

    def __str__(self) -> str:
        return f"{self.index}: {self.original} -> {self.replacement}"
