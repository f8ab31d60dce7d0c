"""
Pydantic models shared by the pipeline, the execution log and the HTTP API.

Log entry metadata is a closed set of shapes, discriminated by ``kind``, so the
timeline viewer can rely on exactly these fields.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class ErrorDetail(BaseModel):
    """Message of a failed agent invocation."""
    message: str


class ErrorMetadata(BaseModel):
    """Agent invocation raised; output is empty."""
    kind: Literal["error"] = "error"
    error: ErrorDetail
    attempt: Optional[int] = None  # Only set for fact-check attempts


class WarningDetail(BaseModel):
    """Non-fatal problem the pipeline proceeded past."""
    message: str
    final_issues: List[str] = Field(default_factory=list)


class WarningMetadata(BaseModel):
    """Fact-check retries exhausted; pipeline continued with the last draft."""
    kind: Literal["warning"] = "warning"
    warning: WarningDetail


class FactCheckAttemptMetadata(BaseModel):
    """Outcome of one fact-check attempt."""
    kind: Literal["fact_check"] = "fact_check"
    attempt: int
    passed: bool
    issues: List[str] = Field(default_factory=list)


class RevisionMetadata(BaseModel):
    """Writer re-run driven by fact-check feedback."""
    kind: Literal["revision"] = "revision"
    is_revision: Literal[True] = True
    attempt: int


LogMetadata = Union[ErrorMetadata, WarningMetadata, FactCheckAttemptMetadata, RevisionMetadata]


def error_metadata(message: str, attempt: Optional[int] = None) -> ErrorMetadata:
    """Build the metadata for a failed agent invocation."""
    return ErrorMetadata(error=ErrorDetail(message=message), attempt=attempt)


# API models

class GenerateRequest(BaseModel):
    """Request body for running the pipeline on a requirements document."""
    prd: StrictStr

    @field_validator("prd")
    @classmethod
    def prd_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prd must be a non-empty string")
        return value.strip()


class RunResult(BaseModel):
    """Fully populated state of a completed run."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    run_id: UUID
    research: str
    draft: str
    fact_check_passed: bool
    final_post: str


class GenerateResponse(BaseModel):
    """Success envelope for the generate endpoint."""
    success: bool = True
    data: RunResult


class ErrorResponse(BaseModel):
    """Failure envelope returned by the API."""
    success: bool = False
    error: str


class AgentLogResponse(BaseModel):
    """One execution log entry as returned to the timeline viewer."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    run_id: UUID
    agent: str
    input: str
    output: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime


class RunSummary(BaseModel):
    """Aggregate view of one run's log entries."""
    run_id: UUID
    entry_count: int
    started_at: datetime
    last_entry_at: datetime
