from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import ValidationError

from loop_repair.errors import DecodeError, SuiteError
from loop_repair.machine import Machine, RunOutcome
from loop_repair.parser import parse_program
from loop_repair.program import Program
from loop_repair.repair import RepairOutcome, RepairSettings, repair_and_run
from loop_repair.schemas import RepairExpectation, RunExpectation, SuiteCase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuiteSpec:
    suite_id: str
    title: str
    cases: list[SuiteCase]
    base_dir: Path


@dataclass(frozen=True)
class CaseResult:
    case_id: str
    run: RunOutcome | None = None
    repair: RepairOutcome | None = None
    failures: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


def load_suite(path: Path) -> SuiteSpec:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SuiteError(f"{path}: cannot read suite: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SuiteError(f"{path}: invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise SuiteError("suite must be a YAML mapping")

    suite_id = str(data.get("suite_id") or data.get("id") or path.stem)
    title = str(data.get("title") or suite_id)

    raw_cases = data.get("cases")
    if not isinstance(raw_cases, list) or not raw_cases:
        raise SuiteError("suite.cases must be a non-empty list")

    cases: list[SuiteCase] = []
    seen: set[str] = set()
    for raw in raw_cases:
        if not isinstance(raw, dict):
            raise SuiteError("each case must be a mapping")
        try:
            case = SuiteCase.model_validate(raw)
        except ValidationError as exc:
            raise SuiteError(f"case {raw.get('id')!r}: {exc}") from exc
        if case.id in seen:
            raise SuiteError(f"duplicate case id: {case.id}")
        seen.add(case.id)
        cases.append(case)

    return SuiteSpec(suite_id=suite_id, title=title, cases=cases, base_dir=path.parent)


def case_program(case: SuiteCase, *, base_dir: Path) -> Program:
    if case.program is not None:
        return parse_program(case.program)
    if case.path is None:
        raise SuiteError(f"case {case.id}: no program or path")
    p = Path(case.path)
    if not p.is_absolute():
        p = (base_dir / p).resolve()
    if not p.is_file():
        raise SuiteError(f"case {case.id}: program file not found: {p}")
    try:
        src = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SuiteError(f"case {case.id}: cannot read {p}: {exc}") from exc
    return parse_program(src)


def _check_run(expect: RunExpectation, outcome: RunOutcome) -> list[str]:
    failures: list[str] = []
    if outcome.status != expect.status:
        failures.append(f"run status {outcome.status.value} != {expect.status.value}")
    if expect.accumulator is not None and outcome.accumulator != expect.accumulator:
        failures.append(f"run accumulator {outcome.accumulator} != {expect.accumulator}")
    if expect.pointer is not None and outcome.pointer != expect.pointer:
        failures.append(f"run pointer {outcome.pointer} != {expect.pointer}")
    return failures


def _check_repair(expect: RepairExpectation, outcome: RepairOutcome) -> list[str]:
    failures: list[str] = []
    if outcome.status != expect.status:
        failures.append(f"repair status {outcome.status.value} != {expect.status.value}")
    if expect.accumulator is not None and outcome.accumulator != expect.accumulator:
        failures.append(f"repair accumulator {outcome.accumulator} != {expect.accumulator}")
    if expect.patch_index is not None:
        got = outcome.patch.index if outcome.patch else None
        if got != expect.patch_index:
            failures.append(f"repair patch index {got} != {expect.patch_index}")
    return failures


def check_case(
    case: SuiteCase, *, base_dir: Path, settings: RepairSettings | None = None
) -> CaseResult:
    try:
        program = case_program(case, base_dir=base_dir)
    except DecodeError as exc:
        return CaseResult(case_id=case.id, failures=[f"decode error: {exc}"])

    run = Machine(program).run()
    failures: list[str] = []
    if case.expect_run is not None:
        failures.extend(_check_run(case.expect_run, run))

    repair: RepairOutcome | None = None
    if case.expect_repair is not None:
        repair = repair_and_run(program, settings)
        failures.extend(_check_repair(case.expect_repair, repair))

    if failures:
        logger.warning("case %s failed: %s", case.id, "; ".join(failures))
    return CaseResult(case_id=case.id, run=run, repair=repair, failures=failures)


def check_suite(suite: SuiteSpec, *, settings: RepairSettings | None = None) -> list[CaseResult]:
    return [check_case(c, base_dir=suite.base_dir, settings=settings) for c in suite.cases]
