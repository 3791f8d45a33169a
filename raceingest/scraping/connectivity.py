"""
Bounded-time reachability check for result sites.
"""

from __future__ import annotations

import logging

import requests

from raceingest.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0


class ConnectivityProbe:
    """
    Sends a HEAD request and reports whether the site answered with 2xx.

    `check` never raises: an unreachable source is a normal negative answer.
    """

    def __init__(self, *, session: requests.Session, user_agent: str | None = None) -> None:
        self._session = session
        self._headers = {"User-Agent": user_agent} if user_agent else {}

    def check(self, url: str, timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS) -> bool:
        try:
            response = self._session.head(
                url,
                headers=self._headers,
                timeout=timeout,
                allow_redirects=True,
            )
        except (requests.RequestException, ValueError) as exc:
            log_event(
                logger,
                logging.WARNING,
                "connectivity_probe_failed",
                url=url,
                timeout_seconds=timeout,
                error=str(exc),
            )
            return False

        reachable = 200 <= response.status_code < 300
        log_event(
            logger,
            logging.INFO if reachable else logging.WARNING,
            "connectivity_probe_completed",
            url=url,
            status_code=response.status_code,
            reachable=reachable,
        )
        return reachable
