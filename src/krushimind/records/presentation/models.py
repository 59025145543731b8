"""Pydantic models for record API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from shared_kernel.storage.value_objects import DomainRecord


class CreateIdentificationRequest(BaseModel):
    """Request model for storing an identification result."""

    model_config = ConfigDict(populate_by_name=True)

    image_data: str | None = Field(
        None, alias="imageData", description="Captured image, usually a data URL"
    )
    result: Any = Field(..., description="Identification result as returned by the model")


class RecordResponse(BaseModel):
    """Response model for a stored record."""

    id: int = Field(..., description="Local record ID")
    created_at: datetime = Field(..., description="When the record was created")
    synced: bool = Field(..., description="Whether the server confirmed the record")
    data: dict[str, Any] = Field(default_factory=dict, description="Record fields")

    @classmethod
    def from_domain(cls, record: DomainRecord) -> RecordResponse:
        """Create response from a domain record.

        Args:
            record: Stored record carrying its local id

        Returns:
            RecordResponse with the record's fields
        """
        return cls(
            id=record.id,
            created_at=record.created_at,
            synced=record.synced,
            data=dict(record.payload),
        )


class SetPreferenceRequest(BaseModel):
    """Request model for writing a user preference."""

    value: Any = Field(..., description="Preference value (any JSON value)")


class PreferenceResponse(BaseModel):
    """Response model for a user preference."""

    key: str
    value: Any
