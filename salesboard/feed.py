"""Sources of raw task records: an HTTP JSON feed or a local JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TASKS_PATH = "/tasks.json"


def _as_records(payload: Any, origin: str) -> list[Any] | None:
    if not isinstance(payload, list):
        logger.warning("Task payload from %s is not a list; ignoring it", origin)
        return None
    return payload


class TaskFeedClient:
    """Fetches the task list from a static JSON endpoint.

    ``fetch_records`` returns None whenever the caller should fall back to
    generated data: a non-success status, a body that is not JSON, or JSON
    that is not a list. Transport failures are raised.
    """

    def __init__(
        self,
        base_url: str,
        path: str = DEFAULT_TASKS_PATH,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.path = path
        self._client = httpx.Client(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _get(self) -> httpx.Response:
        return self._client.get(self.path)

    def fetch_records(self) -> list[Any] | None:
        resp = self._get()
        origin = str(resp.request.url)
        if not resp.is_success:
            logger.warning("GET %s returned %d", origin, resp.status_code)
            return None
        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning("GET %s returned invalid JSON: %s", origin, e)
            return None
        records = _as_records(payload, origin)
        if records is not None:
            logger.info("Fetched %d raw task record(s) from %s", len(records), origin)
        return records

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> TaskFeedClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class TaskFileSource:
    """Reads the task list from a JSON file on disk, with the same contract."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def fetch_records(self) -> list[Any] | None:
        return load_records_file(self.path)


def load_records_file(path: str | Path) -> list[Any] | None:
    """Load raw task records from a JSON file; None if missing or unusable."""
    p = Path(path)
    if not p.is_file():
        logger.warning("Task file not found: %s", p)
        return None
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except ValueError as e:
        logger.warning("Task file %s is not valid JSON: %s", p, e)
        return None
    return _as_records(payload, str(p))
