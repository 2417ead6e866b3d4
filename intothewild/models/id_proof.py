from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from intothewild.database import Base
from datetime import datetime

class IdType(Base):
    __tablename__ = "id_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False) # Aadhaar, PAN, Passport...
    description = Column(String(255), nullable=True)


class TrekRequiredIdType(Base):
    __tablename__ = "trek_required_id_types"
    __table_args__ = (UniqueConstraint("trek_id", "id_type_id"),)

    id = Column(Integer, primary_key=True, index=True)
    trek_id = Column(Integer, ForeignKey("trek_events.id"), nullable=False, index=True)
    id_type_id = Column(Integer, ForeignKey("id_types.id"), nullable=False)

    trek = relationship("TrekEvent", back_populates="required_id_types")
    id_type = relationship("IdType")


class UserIdProof(Base):
    __tablename__ = "user_id_proofs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    id_type_id = Column(Integer, ForeignKey("id_types.id"), nullable=False)
    proof_url = Column(String(500), nullable=False)
    verification_status = Column(String(20), nullable=False, default="pending") # pending, approved, rejected
    admin_notes = Column(String(255), nullable=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow)
    verified_at = Column(DateTime, nullable=True)
    verified_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    user = relationship("User", back_populates="id_proofs", foreign_keys=[user_id])
    id_type = relationship("IdType")
