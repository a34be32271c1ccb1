from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from itertools import islice

from loop_repair.machine import Machine, RunOutcome, RunStatus
from loop_repair.program import Patch, Program

logger = logging.getLogger(__name__)


class RepairStatus(str, Enum):
    COMPLETED = "completed"
    NO_FIX_FOUND = "no_fix_found"
    ADDRESS_ERROR = "address_error"


@dataclass(frozen=True)
class RepairOutcome:
    status: RepairStatus
    accumulator: int | None = None
    patch: Patch | None = None
    candidates_tried: int = 0
    run: RunOutcome | None = None

    @property
    def success(self) -> bool:
        return self.status == RepairStatus.COMPLETED


@dataclass(frozen=True)
class RepairSettings:
    max_workers: int = 1
    # Candidates evaluated per batch when max_workers > 1.
    chunk_size: int = 64


def evaluate_patch(program: Program, patch: Patch) -> RunOutcome:
    """Run a fresh Machine over `program` with `patch` applied."""
    return Machine(patch.apply(program)).run()


def _chunks(patches: Iterator[Patch], size: int) -> Iterator[list[Patch]]:
    while True:
        chunk = list(islice(patches, size))
        if not chunk:
            return
        yield chunk


class RepairSearch:
    """Find the lowest-index Jump/NoOp flip that makes a program terminate."""

    def __init__(self, settings: RepairSettings | None = None) -> None:
        self._settings = settings or RepairSettings()

    def search(self, program: Program) -> RepairOutcome:
        if max(1, int(self._settings.max_workers)) == 1:
            return self._search_sequential(program)
        return self._search_parallel(program)

    def _search_sequential(self, program: Program) -> RepairOutcome:
        tried = 0
        for patch in program.repair_candidates():
            tried += 1
            outcome = evaluate_patch(program, patch)
            logger.debug("candidate %s -> %s", patch, outcome.status.value)
            if outcome.completed:
                return self._found(patch=patch, outcome=outcome, tried=tried)
        return self._exhausted(tried=tried)

    def _search_parallel(self, program: Program) -> RepairOutcome:
        tried = 0
        size = max(1, int(self._settings.chunk_size))
        with ThreadPoolExecutor(
            max_workers=int(self._settings.max_workers), thread_name_prefix="loop_repair"
        ) as pool:
            for chunk in _chunks(program.repair_candidates(), size):
                outcomes = list(pool.map(lambda p: evaluate_patch(program, p), chunk))
                winner = _lowest_success(chunk, outcomes)
                if winner is not None:
                    patch, outcome = winner
                    # Count as if evaluated sequentially up to the winner.
                    tried += chunk.index(patch) + 1
                    return self._found(patch=patch, outcome=outcome, tried=tried)
                tried += len(chunk)
                logger.debug("no fix in candidates %d..%d", chunk[0].index, chunk[-1].index)
        return self._exhausted(tried=tried)

    def _found(self, *, patch: Patch, outcome: RunOutcome, tried: int) -> RepairOutcome:
        logger.info(
            "fix found: %s accumulator=%d after %d candidates", patch, outcome.accumulator, tried
        )
        return RepairOutcome(
            status=RepairStatus.COMPLETED,
            accumulator=outcome.accumulator,
            patch=patch,
            candidates_tried=tried,
            run=outcome,
        )

    def _exhausted(self, *, tried: int) -> RepairOutcome:
        logger.info("no single-instruction fix found after %d candidates", tried)
        return RepairOutcome(status=RepairStatus.NO_FIX_FOUND, candidates_tried=tried)


def _lowest_success(
    patches: Sequence[Patch], outcomes: Sequence[RunOutcome]
) -> tuple[Patch, RunOutcome] | None:
    for patch, outcome in zip(patches, outcomes, strict=True):
        if outcome.completed:
            return patch, outcome
    return None


def repair_and_run(program: Program, settings: RepairSettings | None = None) -> RepairOutcome:
    """Run `program`; if it cycles, search for a single-instruction fix."""
    direct = Machine(program).run()
    if direct.status == RunStatus.COMPLETED:
        return RepairOutcome(
            status=RepairStatus.COMPLETED, accumulator=direct.accumulator, run=direct
        )
    if direct.status == RunStatus.ADDRESS_ERROR:
        return RepairOutcome(status=RepairStatus.ADDRESS_ERROR, run=direct)
    logger.info(
        "cycle detected at pointer %d (accumulator=%d); searching for a fix",
        direct.pointer,
        direct.accumulator,
    )
    return RepairSearch(settings).search(program)
