from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class TentTypeCreate(BaseModel):
    name: str = Field(..., max_length=100)
    capacity: int = Field(2, ge=1)
    rental_price_per_night: float = Field(0.0, ge=0)

class TentTypeRead(TentTypeCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)

class TentInventoryUpdate(BaseModel):
    event_id: int
    tent_type_id: int
    total_available: int = Field(..., ge=0)

class TentInventoryRead(BaseModel):
    id: int
    event_id: int
    tent_type_id: int
    total_available: int
    reserved_count: int
    available: int = 0
    tent_type: TentTypeRead

    model_config = ConfigDict(from_attributes=True)

class TentRequestCreate(BaseModel):
    event_id: int
    tent_type_id: int
    quantity: int = Field(..., ge=1)
    nights: int = Field(1, ge=1)
    notes: Optional[str] = Field(None, max_length=255)

class TentRequestReview(BaseModel):
    action: str = Field(..., pattern="^(approve|reject)$")
    admin_notes: Optional[str] = Field(None, max_length=255)

class TentRequestRead(BaseModel):
    id: int
    event_id: int
    user_id: int
    tent_type_id: int
    quantity_requested: int
    nights: int
    total_cost: float
    request_notes: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
