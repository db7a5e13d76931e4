"""FastAPI dependency injection for services."""

import threading
from typing import Annotated, Optional

from fastapi import Depends, Header, Request
from google.cloud import bigquery
from slowapi import Limiter
from slowapi.util import get_remote_address

from vin_offers.config import Settings, get_settings, load_service_account
from vin_offers.core.errors import UpstreamError
from vin_offers.core.logging import log_error, logger
from vin_offers.models.identity import Identity
from vin_offers.services.auth import AccessGate, GoogleTokenVerifier, TokenVerifier
from vin_offers.services.usage import UsageRecorder
from vin_offers.services.warehouse import OfferWarehouse

limiter = Limiter(key_func=get_remote_address)


def lookup_rate_limit() -> str:
    return get_settings().rate_limit


# -----------------------------------------------------------------------------
# BigQuery Client
# -----------------------------------------------------------------------------

_bigquery_client: bigquery.Client | None = None
_client_lock = threading.Lock()


def create_bigquery_client(settings: Settings) -> bigquery.Client:
    credentials = load_service_account(settings.warehouse_credentials())
    return bigquery.Client(project=settings.google_project_id, credentials=credentials)


def get_bigquery(
    settings: Annotated[Settings, Depends(get_settings)],
) -> bigquery.Client:
    """Get or create the shared BigQuery client (thread-safe)."""
    global _bigquery_client
    if _bigquery_client is None:
        with _client_lock:
            if _bigquery_client is None:
                logger.info(f"Creating BigQuery client project={settings.google_project_id}")
                try:
                    _bigquery_client = create_bigquery_client(settings)
                except Exception as e:
                    log_error("BigQuery client creation failed", e)
                    raise UpstreamError("No se pudo conectar con el almacén de datos") from e
    return _bigquery_client


def get_offer_warehouse(
    client: Annotated[bigquery.Client, Depends(get_bigquery)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> OfferWarehouse:
    return OfferWarehouse(client, settings.offer_table)


def get_usage_recorder(
    settings: Annotated[Settings, Depends(get_settings)],
) -> UsageRecorder:
    # The client is resolved inside the background task, never before the response
    return UsageRecorder(
        lambda: get_bigquery(settings),
        settings.usage_table_id,
        timezone=settings.usage_timezone,
    )


# -----------------------------------------------------------------------------
# Google Sign-In
# -----------------------------------------------------------------------------

_token_verifier: GoogleTokenVerifier | None = None


def get_token_verifier() -> TokenVerifier:
    global _token_verifier
    if _token_verifier is None:
        _token_verifier = GoogleTokenVerifier()
    return _token_verifier


def get_access_gate(
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccessGate:
    if not settings.google_client_id:
        logger.warning("GOOGLE_CLIENT_ID not set - token audience is not checked")
    return AccessGate(
        verifier,
        allowed_domain=settings.allowed_email_domain,
        audience=settings.google_client_id,
    )


def require_identity(
    request: Request,
    gate: Annotated[AccessGate, Depends(get_access_gate)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> Identity:
    """Gate for protected routes; stores the caller on ``request.state``."""
    identity = gate.authorize(authorization)
    request.state.identity = identity
    return identity
