"""Pydantic schemas for the images API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, field_validator

from job_board.common.schema import BaseSchema

from .filters import tag_value


class ImageOut(BaseSchema):
    id: int
    infra: str
    name: str
    is_default: bool
    tags: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ImageCreate(BaseSchema):
    """Payload used to register an image."""

    infra: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    is_default: bool = False
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("infra", "name")
    @classmethod
    def _strip(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped

    @field_validator("tags", mode="before")
    @classmethod
    def _stringify_tags(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key): tag_value(item) for key, item in value.items()}
        return value


class ImagesMeta(BaseSchema):
    matching_query: str | None = None


class ImagesEnvelope(BaseSchema):
    type: Literal["images"] = Field(default="images", alias="@type")
    data: list[ImageOut] = Field(default_factory=list)
    meta: ImagesMeta | None = None


__all__ = ["ImageCreate", "ImageOut", "ImagesEnvelope", "ImagesMeta"]
