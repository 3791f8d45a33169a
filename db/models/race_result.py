"""
db/models/race_result.py

One participant's performance row for an event and distance.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONType


class RaceResult(Base):
    __tablename__ = "race_results"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    athlete_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        comment="Filled in later by athlete matching",
    )
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bib_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str | None] = mapped_column(String(16), nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    finish_time: Mapped[str | None] = mapped_column(String(32), nullable=True)
    pace: Mapped[str | None] = mapped_column(String(32), nullable=True)
    gender_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category_position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    country: Mapped[str | None] = mapped_column(String(64), nullable=True)
    splits: Mapped[dict[str, str] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Checkpoint label -> elapsed time",
    )
    metadata_json: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Distance and source-specific metadata",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_race_results_event_id", "event_id"),
        Index("ix_race_results_normalized_name", "normalized_name"),
        Index("ix_race_results_athlete_id", "athlete_id"),
    )
