"""
Repository for race events and their result rows.
"""

from __future__ import annotations

import re
import unicodedata
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from db.models.event import Event
from db.models.race_result import RaceResult

_DEFAULT_BATCH_SIZE = 500
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_name(name: str) -> str:
    """
    Lower-case, strip accents and punctuation, collapse whitespace.
    """

    decomposed = unicodedata.normalize("NFKD", name)
    ascii_only = "".join(char for char in decomposed if not unicodedata.combining(char))
    return _NON_ALNUM.sub(" ", ascii_only.lower()).strip()


class EventRepository:
    """
    Event lookup plus conflict-safe event and batched result inserts.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_url(self, event_url: str) -> Event | None:
        stmt = select(Event).where(Event.event_url == event_url)
        return self._session.scalars(stmt).first()

    def insert_if_absent(self, payload: dict[str, Any]) -> uuid.UUID | None:
        """
        Insert one event; return its id, or None when the URL already exists.
        """

        insert_fn = sqlite_insert if self._dialect() == "sqlite" else postgresql_insert
        stmt = (
            insert_fn(Event)
            .values(id=uuid.uuid4(), **payload)
            .on_conflict_do_nothing(index_elements=["event_url"])
            .returning(Event.id)
        )
        return self._session.scalars(stmt).first()

    def id_for_url(self, event_url: str) -> uuid.UUID | None:
        stmt = select(Event.id).where(Event.event_url == event_url)
        return self._session.scalars(stmt).first()

    def bulk_insert_results(
        self,
        payloads: Sequence[dict[str, Any]],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        if not payloads:
            return 0

        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(payloads), size):
            chunk = list(payloads[start : start + size])
            self._session.execute(insert(RaceResult), chunk)
            inserted += len(chunk)
        return inserted

    def _dialect(self) -> str:
        return self._session.get_bind().dialect.name
