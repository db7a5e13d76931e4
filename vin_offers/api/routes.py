"""FastAPI route definitions for the VIN offers API."""

from typing import Annotated, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from vin_offers.api.deps import (
    get_offer_warehouse,
    get_usage_recorder,
    limiter,
    lookup_rate_limit,
    require_identity,
)
from vin_offers.core.logging import logger
from vin_offers.models.identity import Identity
from vin_offers.models.offers import OfferResponse, OfferView
from vin_offers.services.presentation import build_offer_view
from vin_offers.services.usage import UsageRecorder
from vin_offers.services.vin import validate_vin
from vin_offers.services.warehouse import OfferWarehouse

router = APIRouter()

# Routes are sync: the BigQuery and google-auth SDKs block, so FastAPI runs
# these handlers in its threadpool.


@router.get("/me", response_model=Identity)
def me(
    background_tasks: BackgroundTasks,
    identity: Annotated[Identity, Depends(require_identity)],
    recorder: Annotated[UsageRecorder, Depends(get_usage_recorder)],
):
    """Current signed-in user."""
    background_tasks.add_task(recorder.record, identity)
    return identity


@router.get("/ofertas", response_model=OfferResponse)
@limiter.limit(lookup_rate_limit)
def get_offers(
    request: Request,
    background_tasks: BackgroundTasks,
    identity: Annotated[Identity, Depends(require_identity)],
    warehouse: Annotated[OfferWarehouse, Depends(get_offer_warehouse)],
    recorder: Annotated[UsageRecorder, Depends(get_usage_recorder)],
    vin: Optional[str] = None,
):
    """Primary and secondary offers for a VIN.

    - 400 when the VIN is missing or malformed (no query is issued)
    - 404 with ``found: false`` when the warehouse has no row
    """
    normalized = validate_vin(vin)
    logger.info(f"Offer lookup vin={normalized} user={identity.email}")

    # Matched case-insensitively; a 404 echoes the value as the caller sent it
    record = warehouse.find_offers(vin.strip())
    background_tasks.add_task(recorder.record, identity)
    return record.to_response()


@router.get("/ofertas/vista", response_model=OfferView)
@limiter.limit(lookup_rate_limit)
def get_offer_view(
    request: Request,
    background_tasks: BackgroundTasks,
    identity: Annotated[Identity, Depends(require_identity)],
    warehouse: Annotated[OfferWarehouse, Depends(get_offer_warehouse)],
    recorder: Annotated[UsageRecorder, Depends(get_usage_recorder)],
    vin: Optional[str] = None,
):
    """Same lookup, resolved against the offer catalog and rendered."""
    normalized = validate_vin(vin)
    logger.info(f"Offer view vin={normalized} user={identity.email}")

    record = warehouse.find_offers(vin.strip())
    background_tasks.add_task(recorder.record, identity)
    return build_offer_view(record)
