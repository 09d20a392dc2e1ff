"""Batch schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Largest value an INTEGER column holds on every supported backend
MAX_COUNT = 2**31 - 1


class BatchStatus:
    """Batch status values."""

    ONGOING = "Ongoing"
    PAUSED = "Paused"
    FINISHED = "Finished"
    CANCELLED = "Cancelled"

    ACTIVE = (ONGOING, PAUSED)
    TERMINAL = (FINISHED, CANCELLED)


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BatchCreate(CamelModel):
    """Request to start a new batch."""

    title: str = Field(..., description="Batch title", min_length=1, max_length=200)
    seed_type: int = Field(..., description="Seed type code", strict=True, ge=0, le=MAX_COUNT)
    output_count: int = Field(..., description="Number of pots to produce", strict=True, gt=0, le=MAX_COUNT)


class BatchProgressUpdate(CamelModel):
    """Progress report from the machine, optionally with a supply reading."""

    pots_increment: Optional[int] = Field(None, description="Pots completed since last report", strict=True)
    soil_level: Optional[int] = Field(None, description="0 = Low, 1 = Sufficient", strict=True, ge=0, le=1)
    cup_level: Optional[int] = Field(None, description="0 = Low, 1 = Sufficient", strict=True, ge=0, le=1)


class BatchResponse(CamelModel):
    """Schema for batch response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    seed_type: int
    output_count: int
    pots_done_count: int
    status: str
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str
