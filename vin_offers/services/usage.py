"""Best-effort usage audit: one BigQuery row per authorised request."""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from google.cloud import bigquery

from vin_offers.core.logging import get_logger, log_db_query, log_error
from vin_offers.models.identity import Identity


class UsageRecorder:
    """Appends audit rows; never raises from ``record``.

    Meant to run as a FastAPI background task. The client and the time zone
    are both resolved inside ``record`` so a broken warehouse connection or a
    bad ``USAGE_TIMEZONE`` only loses the audit row.
    """

    def __init__(
        self,
        client_factory: Callable[[], bigquery.Client],
        table_id: str,
        timezone: str = "America/Mexico_City",
        clock: Optional[Callable[[ZoneInfo], datetime]] = None,
        logger: logging.Logger | None = None,
    ):
        self._client_factory = client_factory
        self._table_id = table_id
        self._timezone = timezone
        self._clock = clock or (lambda tz: datetime.now(tz))
        self._log = logger or get_logger("usage")

    def build_row(self, identity: Identity) -> dict[str, Any]:
        now = self._clock(ZoneInfo(self._timezone))
        return {
            "email": identity.email,
            "name": identity.name or "",
            "usage_count": 1,
            "date": now.date().isoformat(),
            "timestamp": now.isoformat(),
        }

    def record(self, identity: Identity) -> bool:
        """Insert one row; returns whether the insert was accepted."""
        try:
            row = self.build_row(identity)
            client = self._client_factory()
            start = time.time()
            errors = client.insert_rows_json(self._table_id, [row])
            log_db_query("insert", self._table_id, (time.time() - start) * 1000)
        except Exception as e:
            log_error("Usage audit write failed", e, log=self._log, email=identity.email)
            return False

        if errors:
            log_error("Usage audit rows rejected", log=self._log, errors=errors)
            return False
        return True
