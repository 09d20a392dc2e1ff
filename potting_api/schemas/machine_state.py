"""Machine state schemas."""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from potting_api.schemas.batch import CamelModel


class SupplyLevel:
    """Binary supply indicator values."""

    LOW = 0
    SUFFICIENT = 1

    VALUES = (LOW, SUFFICIENT)


class SupplyReading(CamelModel):
    """Sensor reading; absent fields are left unchanged."""

    soil_level: Optional[int] = Field(None, description="0 = Low, 1 = Sufficient", strict=True, ge=0, le=1)
    cup_level: Optional[int] = Field(None, description="0 = Low, 1 = Sufficient", strict=True, ge=0, le=1)


class MachineStateResponse(CamelModel):
    """Schema for machine state response."""

    model_config = ConfigDict(from_attributes=True)

    singleton_key: str
    soil_level: int
    cup_level: int
    active_batch_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
