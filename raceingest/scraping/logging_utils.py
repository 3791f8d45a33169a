"""
Structured logging helpers for scrape-job workflows.

Every line is one JSON object keyed by `event`; job-scoped lines also
carry `job_id`, `organiser` and `event_url`.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Protocol

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class _JobLike(Protocol):
    id: Any
    organiser: str
    event_url: str


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def log_job_event(
    logger: logging.Logger,
    level: int,
    event: str,
    job: _JobLike,
    **fields: Any,
) -> None:
    """
    Same as log_event, with the job id, organiser and URL attached.
    """

    log_event(
        logger,
        level,
        event,
        job_id=job.id,
        organiser=job.organiser,
        event_url=job.event_url,
        **fields,
    )


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once for a CLI or worker process.

    `level` falls back to LOG_LEVEL, then INFO.
    """

    name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=_LOG_FORMAT)
    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(logging.WARNING, logging.getLogger().level))
