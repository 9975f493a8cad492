"""
Customer profile model for database.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from service_center.database import Base


class CustomerProfile(Base):
    """Customer profile wrapping a login user."""

    __tablename__ = "customer_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    membership_status = Column(String, default="standard", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", lazy="joined")
    vehicles = relationship("Vehicle", back_populates="customer", cascade="all, delete-orphan")
