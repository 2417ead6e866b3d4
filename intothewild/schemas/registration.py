from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional
from datetime import datetime

MAX_OFFERED_SEATS = 8

class RegistrationCreate(BaseModel):
    trek_id: int
    indemnity_accepted: bool = False
    registrant_name: Optional[str] = Field(None, max_length=100)
    registrant_phone: Optional[str] = Field(None, max_length=20)
    is_driver: bool = False
    offered_seats: int = Field(0, ge=0, le=MAX_OFFERED_SEATS)

    @model_validator(mode="after")
    def check_carpool_seats(self):
        if self.is_driver and self.offered_seats < 1:
            raise ValueError(f"Drivers must offer between 1 and {MAX_OFFERED_SEATS} seats.")
        if not self.is_driver:
            self.offered_seats = 0
        return self

class RegistrationRead(BaseModel):
    id: int
    user_id: int
    trek_id: int
    payment_status: str
    booking_datetime: datetime
    indemnity_accepted_at: Optional[datetime] = None
    registrant_name: Optional[str] = None
    registrant_phone: Optional[str] = None
    payment_proof_url: Optional[str] = None
    payer_name: Optional[str] = None
    payer_phone: Optional[str] = None
    proof_uploaded_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    cancellation_datetime: Optional[datetime] = None
    is_driver: bool = False
    offered_seats: int = 0

    model_config = ConfigDict(from_attributes=True)
