"""Pet-related Pydantic schemas (wire format of the remote pet authority)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PetStatus(_CamelModel):
    """Authoritative pet snapshot returned by every status/action call.

    Only the three gauges matter to the engine; the rest is carried along
    for display.
    """
    affection_gauge: float
    air_gauge: float
    energy_gauge: float

    user_id: int | None = None
    level: int = 1
    current_exp: int = 0
    required_exp: int = 100
    sunlight: int = 0
    affection: int = 0
    evolution_stage: str = "BABY"  # "BABY", "KID" or "ADULT"
    ventilation_available: bool = True
    last_update: datetime | None = None


class PetActionRequest(_CamelModel):
    user_id: int


class GaugeSaveRequest(_CamelModel):
    """Autosave payload: raw gauge values plus the client timestamp."""
    user_id: int
    affection_gauge: float = Field(ge=0, le=100)
    air_gauge: float = Field(ge=0, le=100)
    energy_gauge: float = Field(ge=0, le=100)
    last_update: str  # ISO 8601
