"""Job records keyed by ``(job_id, site)``."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from job_board.db.base import Base, TimestampMixin


JOB_ID_MAX_LENGTH = 64


class Job(TimestampMixin, Base):
    """A submitted job document plus its queue allocation."""

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[str] = mapped_column(String(JOB_ID_MAX_LENGTH), nullable=False)
    site: Mapped[str] = mapped_column(String(64), nullable=False)
    queue: Mapped[str | None] = mapped_column(String(255), nullable=True)
    processor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (UniqueConstraint("job_id", "site"),)


__all__ = ["JOB_ID_MAX_LENGTH", "Job"]
