from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, Text
from sqlalchemy.orm import relationship
from intothewild.database import Base
from datetime import datetime

class TrekEvent(Base):
    __tablename__ = "trek_events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(150))
    start_datetime = Column(DateTime, nullable=False)
    end_datetime = Column(DateTime, nullable=True)

    # Null or 0 means nobody can register
    max_participants = Column(Integer, nullable=True)
    government_id_required = Column(Boolean, nullable=False, default=False)
    cost = Column(Float, nullable=False, default=0.0)
    status = Column(String(20), default="Upcoming") # Upcoming, Open, Closed, Cancelled
    created_at = Column(DateTime, default=datetime.utcnow)

    registrations = relationship("Registration", back_populates="trek")
    required_id_types = relationship("TrekRequiredIdType", back_populates="trek", cascade="all, delete-orphan")
    tent_inventory = relationship("TentInventory", back_populates="event", cascade="all, delete-orphan")
