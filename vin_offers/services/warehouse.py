"""BigQuery lookup of pre-computed offers by VIN.

The table is read with a single parameterised equality query. Rows come back
with offers stored in several shapes depending on how the table was loaded
(REPEATED column, JSON array text, delimited text), so everything is
normalised here into an ``OfferRecord``.
"""

import json
import logging
import re
import time
from collections.abc import Mapping
from typing import Any, Optional

from google.cloud import bigquery

from vin_offers.config import OfferTableSchema
from vin_offers.core.errors import OffersNotFoundError, UpstreamError
from vin_offers.core.logging import get_logger, log_db_query, log_error
from vin_offers.models.offers import OfferRecord

_OFFER_DELIMITERS = re.compile(r"[;,|]")


def _split_offers(text: str) -> list[str]:
    return [part.strip() for part in _OFFER_DELIMITERS.split(text) if part.strip()]


def _as_strings(items: Any) -> list[str]:
    return [str(item) for item in items if item is not None]


def parse_offer_list(value: Any) -> list[str]:
    """Normalise the offers column into a list of names.

    Strings are tried as a JSON array first and fall back to splitting on
    ``;``, ``,`` or ``|``.
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            return _split_offers(value)
        if isinstance(parsed, list):
            return _as_strings(parsed)
        return _split_offers(value)
    if isinstance(value, (list, tuple)):
        return _as_strings(value)
    return [s for s in (str(value),) if s]


def remove_primary(primary: Optional[str], offers: list[str]) -> list[str]:
    """Drop entries equal to the primary offer, ignoring case and padding."""
    target = (primary or "").strip().lower()
    return [o for o in offers if o.strip().lower() != target]


def _first_present(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def build_offer_record(row: Mapping[str, Any], vin: str) -> OfferRecord:
    """Reshape one result row (aliased to the wire names) into a record.

    Rows that still carry the raw ``*_r`` column names are accepted too.
    """
    primary = str(_first_present(row, "oferta_principal", "oferta_principal_r") or "").strip()
    offers = parse_offer_list(_first_present(row, "ofertas", "ofertas_r"))
    status = row.get("status_cliente_principal")
    status_text = str(status).strip() if status is not None else ""

    return OfferRecord(
        vin=str(row.get("vin") or vin),
        primary_offer=primary or None,
        secondary_offers=remove_primary(primary, offers),
        customer_status=status_text or None,
    )


def build_lookup_query(schema: OfferTableSchema) -> str:
    return f"""
        SELECT
          {schema.vin_column} AS vin,
          {schema.primary_column} AS oferta_principal,
          {schema.offers_column} AS ofertas,
          {schema.status_column} AS status_cliente_principal
        FROM `{schema.table_id}`
        WHERE TRIM(LOWER({schema.vin_column})) = TRIM(LOWER(@vin))
        LIMIT 1"""


class OfferWarehouse:
    """Reads offers for a VIN from the consolidated BigQuery table."""

    def __init__(
        self,
        client: bigquery.Client,
        schema: OfferTableSchema,
        logger: logging.Logger | None = None,
    ):
        self._client = client
        self._schema = schema
        self._query = build_lookup_query(schema)
        self._log = logger or get_logger("warehouse")

    def fetch_row(self, vin: str) -> Optional[dict[str, Any]]:
        """Run the lookup query; ``None`` when the VIN has no row."""
        job_config = bigquery.QueryJobConfig(
            query_parameters=[bigquery.ScalarQueryParameter("vin", "STRING", vin)]
        )
        start = time.time()
        try:
            rows = list(self._client.query(self._query, job_config=job_config).result())
        except Exception as e:
            log_error("Warehouse query failed", e, log=self._log, table=self._schema.table_id)
            raise UpstreamError("Error al consultar el almacén de datos") from e
        log_db_query("select", self._schema.table_id, (time.time() - start) * 1000)

        self._log.debug(f"rows={len(rows)} vin={vin}")
        if not rows:
            return None
        return dict(rows[0].items())

    def find_offers(self, vin: str) -> OfferRecord:
        """Offers for ``vin``. Raises OffersNotFoundError if there are none."""
        row = self.fetch_row(vin)
        if row is None:
            raise OffersNotFoundError(vin)
        return build_offer_record(row, vin)
