"""
Submit scrape jobs and inspect job status from the CLI.
"""

from __future__ import annotations

import argparse
import sys
import uuid

import requests

from db.session import create_db_engine, create_session_factory
from raceingest.config import get_scrape_job_settings
from raceingest.domain import ScrapeJobRequest
from raceingest.schemas import (
    ScrapeJobOutcomeResponse,
    ScrapeJobStatusListResponse,
    ScrapeJobStatusResponse,
)
from raceingest.scraping.logging_utils import configure_logging
from raceingest.scraping.storage import SQLAlchemyJobStore
from raceingest.services import build_scrape_job_coordinator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Race results scrape-job runner.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Scrape one or more event URLs.")
    run.add_argument("urls", nargs="+", help="Event result page URLs.")
    run.add_argument("--organiser", default=None, help="Organiser key; URL matching is used otherwise.")
    run.add_argument("--started-by", dest="started_by", default=None, help="Actor recorded on the job.")
    run.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Concurrent jobs (defaults to SCRAPE_MAX_WORKERS).",
    )

    status = subparsers.add_parser("status", help="Show one job.")
    status.add_argument("job_id", type=uuid.UUID)

    recent = subparsers.add_parser("list", help="List recent jobs.")
    recent.add_argument("--limit", type=int, default=20)
    recent.add_argument("--status", dest="status_filter", default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = _build_parser().parse_args(argv)
    settings = get_scrape_job_settings()

    engine = create_db_engine()
    session_factory = create_session_factory(engine)
    try:
        if args.command == "status":
            job = SQLAlchemyJobStore(session_factory=session_factory).get(args.job_id)
            if job is None:
                print(f"Scrape job not found: {args.job_id}", file=sys.stderr)
                return 1
            print(ScrapeJobStatusResponse.from_job(job).model_dump_json(indent=2))
            return 0

        if args.command == "list":
            jobs = SQLAlchemyJobStore(session_factory=session_factory).list_recent(
                limit=args.limit,
                status=args.status_filter,
            )
            payload = ScrapeJobStatusListResponse(
                jobs=[ScrapeJobStatusResponse.from_job(job) for job in jobs]
            )
            print(payload.model_dump_json(indent=2))
            return 0

        with requests.Session() as http_session:
            coordinator = build_scrape_job_coordinator(
                session_factory=session_factory,
                http_session=http_session,
                settings=settings,
            )
            outcomes = coordinator.process_scrape_jobs(
                [
                    ScrapeJobRequest(
                        event_url=url,
                        organiser=args.organiser,
                        started_by=args.started_by,
                    )
                    for url in args.urls
                ],
                max_workers=args.workers,
            )

        responses = [ScrapeJobOutcomeResponse.from_outcome(outcome) for outcome in outcomes]
        for response in responses:
            print(response.model_dump_json(indent=2))
        return 0 if all(response.succeeded for response in responses) else 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    raise SystemExit(main())
