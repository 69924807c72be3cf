"""Pydantic schemas for the job delivery API."""

from __future__ import annotations

from pydantic import Field

from job_board.common.schema import BaseSchema


class AllocationRequest(BaseSchema):
    jobs: list[str | int] = Field(default_factory=list)


class AllocationResponse(BaseSchema):
    jobs: list[str] = Field(default_factory=list)
    queue: str = Field(..., alias="@queue")


__all__ = ["AllocationRequest", "AllocationResponse"]
