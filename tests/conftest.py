"""
Shared fixtures: in-memory stores, a scripted capability and probe, and a
SQLite-backed session factory.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401
from db.base import Base
from db.session import create_session_factory
from raceingest.config import ScrapeJobSettings
from raceingest.scraping.registry import ScraperRegistry
from raceingest.services import ScrapeJobCoordinator
from tests.helpers.scrape_jobs import (
    FakeResponse,
    InMemoryEventStore,
    InMemoryJobStore,
    ScriptedCapability,
    ScriptedProbe,
)


@pytest.fixture()
def make_response() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture()
def job_store() -> InMemoryJobStore:
    return InMemoryJobStore()


@pytest.fixture()
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture()
def capability() -> ScriptedCapability:
    return ScriptedCapability()


@pytest.fixture()
def probe() -> ScriptedProbe:
    return ScriptedProbe()


@pytest.fixture()
def registry(capability: ScriptedCapability) -> ScraperRegistry:
    return ScraperRegistry([capability])


@pytest.fixture()
def coordinator(
    job_store: InMemoryJobStore,
    event_store: InMemoryEventStore,
    registry: ScraperRegistry,
    probe: ScriptedProbe,
) -> ScrapeJobCoordinator:
    return ScrapeJobCoordinator(
        job_store=job_store,
        event_store=event_store,
        registry=registry,
        probe=probe,
        settings=ScrapeJobSettings(),
    )


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(sqlite_engine)
