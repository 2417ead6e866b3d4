from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Index, text
from sqlalchemy.orm import relationship
from intothewild.database import Base
from datetime import datetime

PENDING = "Pending"
PROOF_UPLOADED = "ProofUploaded"
PAID = "Paid"
CANCELLED = "Cancelled"

PAYMENT_STATUSES = (PENDING, PROOF_UPLOADED, PAID, CANCELLED)

_active_only = text("payment_status != 'Cancelled'")

class Registration(Base):
    __tablename__ = "registrations"
    # One active registration per (user, trek); cancelled rows stay as history
    __table_args__ = (
        Index(
            "uq_registrations_active_user_trek",
            "user_id", "trek_id",
            unique=True,
            sqlite_where=_active_only,
            postgresql_where=_active_only,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    trek_id = Column(Integer, ForeignKey("trek_events.id"), nullable=False, index=True)
    payment_status = Column(String(20), nullable=False, default=PENDING)
    booking_datetime = Column(DateTime, default=datetime.utcnow)
    indemnity_accepted_at = Column(DateTime, nullable=True)

    registrant_name = Column(String(100))
    registrant_phone = Column(String(20))

    payment_proof_url = Column(String(500), nullable=True)
    payer_name = Column(String(100), nullable=True)
    payer_phone = Column(String(20), nullable=True)
    proof_uploaded_at = Column(DateTime, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    cancellation_datetime = Column(DateTime, nullable=True)

    # Carpooling
    is_driver = Column(Boolean, nullable=False, default=False)
    offered_seats = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="registrations", foreign_keys=[user_id])
    trek = relationship("TrekEvent", back_populates="registrations")
