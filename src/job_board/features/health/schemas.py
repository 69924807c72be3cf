"""Pydantic schemas for the health module."""

from __future__ import annotations

from pydantic import Field

from job_board.common.schema import BaseSchema


class HealthResponse(BaseSchema):
    greeting: str = Field(..., description="Fixed greeting.")
    pong: str | None = Field(default=None, description="Redis PING reply, null when unreachable.")
    now: str = Field(..., description="Server time, UTC ISO-8601.")
    version: str = Field(..., description="Service version.")


__all__ = ["HealthResponse"]
