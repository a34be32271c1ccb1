from __future__ import annotations


class LoopRepairError(Exception):
    pass


class DecodeError(LoopRepairError, ValueError):
    def __init__(self, message: str, *, line: int | None = None, col: int | None = None) -> None:
        self.line = line
        self.col = col
        prefix = ""
        if line is not None and col is not None:
            prefix = f"line {line} col {col}: "
        elif line is not None:
            prefix = f"line {line}: "
        super().__init__(prefix + str(message))


class AddressError(LoopRepairError):
    def __init__(self, pointer: int, *, length: int) -> None:
        self.pointer = pointer
        self.length = length
        super().__init__(f"instruction pointer {pointer} outside program of length {length}")


class MachineHalted(LoopRepairError, RuntimeError):
    pass


class SuiteError(LoopRepairError, ValueError):
    pass
