"""
db/models/scrape_job.py

Scrape job model: one tracked attempt to ingest a single event URL.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

UNKNOWN_ORGANISER = "unknown"


class ScrapeJobStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    TERMINAL = frozenset({COMPLETED, FAILED})

    # target status -> statuses it may be entered from
    PREDECESSORS = {
        RUNNING: frozenset({PENDING}),
        COMPLETED: frozenset({RUNNING}),
        FAILED: frozenset({RUNNING}),
    }


class ScrapeJob(Base, TimestampMixin):
    __tablename__ = "scrape_jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    organiser: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        default=UNKNOWN_ORGANISER,
    )
    event_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    started_by: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Actor that submitted the job",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ScrapeJobStatus.PENDING,
        comment="pending, running, completed, failed",
    )
    results_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_scrape_jobs_status", "status"),
        Index("ix_scrape_jobs_event_url", "event_url"),
        Index("ix_scrape_jobs_created_at", "created_at"),
    )
