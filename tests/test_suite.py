from __future__ import annotations

from pathlib import Path

import pytest

from loop_repair.errors import SuiteError
from loop_repair.schemas import SuiteCase
from loop_repair.suite import case_program, check_suite, load_suite
from tests.helpers import SAMPLE_SOURCE

SUITE_YAML = """\
suite_id: handheld
title: Handheld boot code
cases:
  - id: sample
    path: programs/sample.txt
    expect_run:
      status: cycle_detected
      accumulator: 5
    expect_repair:
      status: completed
      accumulator: 8
      patch_index: 7
  - id: straight-line
    program: |
      nop +0
      acc +8
    expect_run:
      status: completed
      accumulator: 8
  - id: self-loop
    program: "jmp +0"
    expect_run:
      status: cycle_detected
      accumulator: 0
      pointer: 0
"""


def _write_suite(tmp_path: Path, text: str = SUITE_YAML) -> Path:
    (tmp_path / "programs").mkdir()
    (tmp_path / "programs" / "sample.txt").write_text(SAMPLE_SOURCE, encoding="utf-8")
    path = tmp_path / "suite.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_suite(tmp_path: Path) -> None:
    suite = load_suite(_write_suite(tmp_path))
    assert suite.suite_id == "handheld"
    assert suite.title == "Handheld boot code"
    assert [c.id for c in suite.cases] == ["sample", "straight-line", "self-loop"]
    assert suite.base_dir == tmp_path


def test_check_suite_passes(tmp_path: Path) -> None:
    results = check_suite(load_suite(_write_suite(tmp_path)))
    assert all(r.passed for r in results), [r.failures for r in results]
    assert results[0].repair is not None and results[0].repair.accumulator == 8
    assert results[1].repair is None


def test_check_suite_reports_mismatch(tmp_path: Path) -> None:
    text = SUITE_YAML.replace("accumulator: 8\n      patch_index: 7", "accumulator: 9\n      patch_index: 2")
    results = check_suite(load_suite(_write_suite(tmp_path, text)))
    assert not results[0].passed
    assert results[0].failures == [
        "repair accumulator 8 != 9",
        "repair patch index 7 != 2",
    ]


def test_check_suite_reports_decode_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("cases:\n  - id: bad\n    program: 'mul +2'\n", encoding="utf-8")
    suite = load_suite(path)
    assert suite.suite_id == "bad"
    (result,) = check_suite(suite)
    assert not result.passed
    assert result.failures[0].startswith("decode error: line 1 col 1")


def test_missing_program_file(tmp_path: Path) -> None:
    path = tmp_path / "suite.yaml"
    path.write_text("cases:\n  - id: gone\n    path: nope.txt\n", encoding="utf-8")
    with pytest.raises(SuiteError, match="program file not found"):
        check_suite(load_suite(path))


@pytest.mark.parametrize(
    "text, match",
    [
        ("- just a list\n", "must be a YAML mapping"),
        ("suite_id: x\ncases: []\n", "non-empty list"),
        ("cases:\n  - id: a\n    program: 'nop +0'\n  - id: a\n    program: 'nop +0'\n", "duplicate case id"),
        ("cases:\n  - id: a\n", "exactly one of program or path"),
        ("cases: [\n", "invalid YAML"),
    ],
)
def test_invalid_suites(tmp_path: Path, text: str, match: str) -> None:
    path = tmp_path / "suite.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(SuiteError, match=match):
        load_suite(path)


def test_bundled_suite_passes() -> None:
    suite_path = Path(__file__).resolve().parents[1] / "suites" / "handheld.yaml"
    results = check_suite(load_suite(suite_path))
    assert [r.case_id for r in results] == ["boot", "straight-line", "self-loop", "no-fix"]
    assert all(r.passed for r in results), [r.failures for r in results]


def test_undecodable_program_file(tmp_path: Path) -> None:
    (tmp_path / "bad.txt").write_bytes(b"acc \xff\n")
    path = tmp_path / "suite.yaml"
    path.write_text("cases:\n  - id: bad\n    path: bad.txt\n", encoding="utf-8")
    with pytest.raises(SuiteError, match="case bad: cannot read"):
        check_suite(load_suite(path))


def test_program_path_pointing_at_directory(tmp_path: Path) -> None:
    (tmp_path / "progs").mkdir()
    path = tmp_path / "suite.yaml"
    path.write_text("cases:\n  - id: dir\n    path: progs\n", encoding="utf-8")
    with pytest.raises(SuiteError, match="program file not found"):
        check_suite(load_suite(path))


def test_undecodable_suite_file(tmp_path: Path) -> None:
    path = tmp_path / "suite.yaml"
    path.write_bytes(b"cases: \xff\n")
    with pytest.raises(SuiteError, match="cannot read suite"):
        load_suite(path)


def test_case_without_source_raises_suite_error(tmp_path: Path) -> None:
    case = SuiteCase.model_construct(id="empty", program=None, path=None)
    with pytest.raises(SuiteError, match="case empty: no program or path"):
        case_program(case, base_dir=tmp_path)
