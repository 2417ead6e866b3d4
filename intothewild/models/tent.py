from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from intothewild.database import Base
from datetime import datetime

class TentType(Base):
    __tablename__ = "tent_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    capacity = Column(Integer, nullable=False, default=2) # people per tent
    rental_price_per_night = Column(Float, nullable=False, default=0.0)


class TentInventory(Base):
    __tablename__ = "tent_inventory"
    __table_args__ = (UniqueConstraint("event_id", "tent_type_id"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("trek_events.id"), nullable=False, index=True)
    tent_type_id = Column(Integer, ForeignKey("tent_types.id"), nullable=False)
    total_available = Column(Integer, nullable=False, default=0)
    reserved_count = Column(Integer, nullable=False, default=0)

    event = relationship("TrekEvent", back_populates="tent_inventory")
    tent_type = relationship("TentType")


class TentRequest(Base):
    __tablename__ = "tent_requests"
    __table_args__ = (UniqueConstraint("event_id", "user_id", "tent_type_id"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("trek_events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    tent_type_id = Column(Integer, ForeignKey("tent_types.id"), nullable=False)
    quantity_requested = Column(Integer, nullable=False)
    nights = Column(Integer, nullable=False, default=1)
    total_cost = Column(Float, nullable=False, default=0.0) # GST included
    request_notes = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="pending") # pending, approved, rejected, cancelled
    admin_notes = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    tent_type = relationship("TentType")
    user = relationship("User")
