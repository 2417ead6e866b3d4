from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

class IdTypeCreate(BaseModel):
    name: str = Field(..., max_length=50)
    description: Optional[str] = Field(None, max_length=255)

class IdTypeRead(IdTypeCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)

class IdProofReview(BaseModel):
    status: str = Field(..., pattern="^(approved|rejected)$")
    admin_notes: Optional[str] = Field(None, max_length=255)

class IdProofRead(BaseModel):
    id: int
    user_id: int
    id_type_id: int
    proof_url: str
    verification_status: str
    admin_notes: Optional[str] = None
    uploaded_at: datetime
    verified_at: Optional[datetime] = None
    id_type: IdTypeRead

    model_config = ConfigDict(from_attributes=True)
