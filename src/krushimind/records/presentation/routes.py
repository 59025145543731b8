"""HTTP routes for records and user preferences."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from records.application.services import RecordService
from records.dependencies import get_record_service
from records.presentation.models import (
    CreateIdentificationRequest,
    PreferenceResponse,
    RecordResponse,
    SetPreferenceRequest,
)

router = APIRouter(
    prefix="/records",
    tags=["records"],
)

preferences_router = APIRouter(
    prefix="/preferences",
    tags=["preferences"],
)


@router.post("/identifications", status_code=status.HTTP_201_CREATED)
async def create_identification(
    request: CreateIdentificationRequest,
    service: Annotated[RecordService, Depends(get_record_service)],
) -> RecordResponse:
    """Store an identification result and queue it for sync.

    Args:
        request: Image data and identification result
        service: Record service

    Returns:
        RecordResponse with the stored record
    """
    record = await service.create_identification(
        image_data=request.image_data,
        result=request.result,
    )
    return RecordResponse.from_domain(record)


@router.get("/identifications")
async def list_identifications(
    service: Annotated[RecordService, Depends(get_record_service)],
) -> list[RecordResponse]:
    """List stored identification results."""
    records = await service.list_identifications()
    return [RecordResponse.from_domain(record) for record in records]


@router.post("/marketplace", status_code=status.HTTP_201_CREATED)
async def create_marketplace_listing(
    listing: Annotated[dict[str, Any], Body()],
    service: Annotated[RecordService, Depends(get_record_service)],
) -> RecordResponse:
    """Store a marketplace listing and queue it for sync.

    The listing body is free-form; ``productType`` is indexed when present.
    """
    record = await service.create_marketplace_listing(listing)
    return RecordResponse.from_domain(record)


@router.get("/marketplace")
async def list_marketplace_listings(
    service: Annotated[RecordService, Depends(get_record_service)],
    product_type: str | None = None,
) -> list[RecordResponse]:
    """List marketplace listings, optionally of a single product type."""
    records = await service.list_marketplace_listings(product_type=product_type)
    return [RecordResponse.from_domain(record) for record in records]


@router.post("/finance", status_code=status.HTTP_201_CREATED)
async def store_financial_info(
    info: Annotated[dict[str, Any], Body()],
    service: Annotated[RecordService, Depends(get_record_service)],
) -> RecordResponse:
    """Store financial info on the device. It is never synced."""
    record = await service.store_financial_info(info)
    return RecordResponse.from_domain(record)


@router.get("/finance")
async def list_financial_info(
    service: Annotated[RecordService, Depends(get_record_service)],
) -> list[RecordResponse]:
    records = await service.list_financial_info()
    return [RecordResponse.from_domain(record) for record in records]


@router.get("/finance/{record_id}")
async def get_financial_info(
    record_id: int,
    service: Annotated[RecordService, Depends(get_record_service)],
) -> RecordResponse:
    """Get financial info by ID.

    Raises:
        HTTPException: 404 if no record has this ID
    """
    record = await service.get_financial_info(record_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Financial info not found",
        )
    return RecordResponse.from_domain(record)


@preferences_router.put("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def set_preference(
    key: str,
    request: SetPreferenceRequest,
    service: Annotated[RecordService, Depends(get_record_service)],
) -> Response:
    """Write a user preference, replacing any previous value."""
    await service.set_preference(key, request.value)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@preferences_router.get("/{key}")
async def get_preference(
    key: str,
    service: Annotated[RecordService, Depends(get_record_service)],
) -> PreferenceResponse:
    """Read a user preference.

    Raises:
        HTTPException: 404 if the preference was never set. A preference
            set to null is returned with a null value.
    """
    preference = await service.find_preference(key)
    if preference is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Preference not found",
        )
    return PreferenceResponse(key=preference.key, value=preference.value)
