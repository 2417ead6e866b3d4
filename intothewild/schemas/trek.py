from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

class TrekBase(BaseModel):
    name: str = Field(..., max_length=150)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=150)
    start_datetime: datetime
    end_datetime: Optional[datetime] = None
    max_participants: Optional[int] = Field(None, ge=0)
    government_id_required: bool = False
    cost: float = Field(0.0, ge=0)
    status: Optional[str] = Field("Upcoming", max_length=20)

class TrekCreate(TrekBase):
    pass

class TrekUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=150)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=150)
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None
    max_participants: Optional[int] = Field(None, ge=0)
    government_id_required: Optional[bool] = None
    cost: Optional[float] = Field(None, ge=0)
    status: Optional[str] = Field(None, max_length=20)

class TrekRead(TrekBase):
    id: int
    cost_with_gst: int = 0
    participant_count: int = 0
    spots_left: int = 0
    is_registered: bool = False

    model_config = ConfigDict(from_attributes=True)

class CapacityRead(BaseModel):
    trek_id: int
    participant_count: int
    max_participants: Optional[int] = None
    spots_left: int
    has_space: bool

class IdRequirementsUpdate(BaseModel):
    id_type_ids: List[int] = []

class CarpoolDriver(BaseModel):
    registration_id: int
    user_id: int
    registrant_name: Optional[str] = None
    offered_seats: int

class CarpoolSummary(BaseModel):
    trek_id: int
    drivers: List[CarpoolDriver] = []
    total_offered_seats: int = 0
    passengers: int = 0
    seats_short: int = 0
