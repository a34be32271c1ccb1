from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from loop_repair.machine import RunOutcome, RunStatus
from loop_repair.program import Patch
from loop_repair.repair import RepairOutcome, RepairStatus


class PatchReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    original: str
    replacement: str

    @classmethod
    def from_patch(cls, patch: Patch) -> PatchReport:
        return cls(index=patch.index, original=str(patch.original), replacement=str(patch.replacement))


class RunReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: RunStatus
    accumulator: int
    pointer: int
    steps: int = Field(default=0, ge=0)
    visited: int = Field(default=0, ge=0)

    @classmethod
    def from_outcome(cls, outcome: RunOutcome) -> RunReport:
        return cls(
            status=outcome.status,
            accumulator=outcome.accumulator,
            pointer=outcome.pointer,
            steps=outcome.steps,
            visited=outcome.visited,
        )


class RepairReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: RepairStatus
    accumulator: int | None = None
    patch: PatchReport | None = None
    candidates_tried: int = Field(default=0, ge=0)
    run: RunReport | None = None

    @classmethod
    def from_outcome(cls, outcome: RepairOutcome) -> RepairReport:
        return cls(
            status=outcome.status,
            accumulator=outcome.accumulator,
            patch=PatchReport.from_patch(outcome.patch) if outcome.patch else None,
            candidates_tried=outcome.candidates_tried,
            run=RunReport.from_outcome(outcome.run) if outcome.run else None,
        )


class RunExpectation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: RunStatus
    accumulator: int | None = None
    pointer: int | None = None

    @field_validator("status")
    @classmethod
    def _terminal_status(cls, v: RunStatus) -> RunStatus:
        if not v.terminal:
            raise ValueError("expected run status must be terminal")
        return v


class RepairExpectation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: RepairStatus
    accumulator: int | None = None
    patch_index: int | None = Field(default=None, ge=0)


class SuiteCase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    title: str | None = None
    program: str | None = None
    path: str | None = None
    expect_run: RunExpectation | None = None
    expect_repair: RepairExpectation | None = None

    @field_validator("id")
    @classmethod
    def _non_empty_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("case id must be a non-empty string")
        return v

    @model_validator(mode="after")
    def _exactly_one_source(self) -> SuiteCase:
        if (self.program is None) == (self.path is None):
            raise ValueError("case must set exactly one of program or path")
        return self
