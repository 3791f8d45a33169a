"""create scrape_jobs, events and race_results tables

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "scrape_jobs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organiser", sa.String(length=120), nullable=False),
        sa.Column("event_url", sa.String(length=2048), nullable=False),
        sa.Column("started_by", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("results_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_scrape_jobs_status", "scrape_jobs", ["status"], unique=False)
    op.create_index("ix_scrape_jobs_event_url", "scrape_jobs", ["event_url"], unique=False)
    op.create_index("ix_scrape_jobs_created_at", "scrape_jobs", ["created_at"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("organiser", sa.String(length=120), nullable=False),
        sa.Column("event_name", sa.String(length=255), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("event_url", sa.String(length=2048), nullable=False),
        sa.Column("distance", sa.String(length=64), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("metadata_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("scraped_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_url", name="uq_events_event_url"),
    )
    op.create_index("ix_events_organiser", "events", ["organiser"], unique=False)
    op.create_index("ix_events_event_date", "events", ["event_date"], unique=False)

    op.create_table(
        "race_results",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("athlete_id", sa.Uuid(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("bib_number", sa.String(length=32), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("normalized_name", sa.String(length=255), nullable=False),
        sa.Column("gender", sa.String(length=16), nullable=True),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("finish_time", sa.String(length=32), nullable=True),
        sa.Column("pace", sa.String(length=32), nullable=True),
        sa.Column("gender_position", sa.Integer(), nullable=True),
        sa.Column("category_position", sa.Integer(), nullable=True),
        sa.Column("country", sa.String(length=64), nullable=True),
        sa.Column("splits", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("metadata_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_race_results_event_id", "race_results", ["event_id"], unique=False)
    op.create_index("ix_race_results_normalized_name", "race_results", ["normalized_name"], unique=False)
    op.create_index("ix_race_results_athlete_id", "race_results", ["athlete_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_race_results_athlete_id", table_name="race_results")
    op.drop_index("ix_race_results_normalized_name", table_name="race_results")
    op.drop_index("ix_race_results_event_id", table_name="race_results")
    op.drop_table("race_results")
    op.drop_index("ix_events_event_date", table_name="events")
    op.drop_index("ix_events_organiser", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_scrape_jobs_created_at", table_name="scrape_jobs")
    op.drop_index("ix_scrape_jobs_event_url", table_name="scrape_jobs")
    op.drop_index("ix_scrape_jobs_status", table_name="scrape_jobs")
    op.drop_table("scrape_jobs")
