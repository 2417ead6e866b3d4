from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from intothewild.database import Base
from datetime import datetime

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(120), unique=True, index=True, nullable=False)
    full_name = Column(String(100))
    phone = Column(String(20), nullable=True)

    # Null for accounts created through Google sign-in
    hashed_password = Column(String, nullable=True)
    role = Column(String(20), nullable=False, default="pending") # participant, admin, pending
    created_at = Column(DateTime, default=datetime.utcnow)

    registrations = relationship("Registration", back_populates="user", foreign_keys="Registration.user_id")
    id_proofs = relationship("UserIdProof", back_populates="user", foreign_keys="UserIdProof.user_id")
