"""Image catalog records."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from job_board.db.base import Base, TimestampMixin


class Image(TimestampMixin, Base):
    """A machine image available on one infrastructure backend."""

    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    infra: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tags: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("images_infra_is_default_idx", "infra", "is_default"),
        Index("images_infra_name_idx", "infra", "name"),
    )


__all__ = ["Image"]
