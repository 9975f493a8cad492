"""
Service request model for database.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from service_center.database import Base
from service_center.exceptions import InvalidStatusError
import enum


class ServiceStatus(str, enum.Enum):
    """Service request lifecycle."""
    NEW = "New"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, raw: str) -> "ServiceStatus":
        """Match a status by value or name, ignoring case, spaces and underscores."""
        key = raw.strip().replace(" ", "").replace("_", "").lower()
        for member in cls:
            if key in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        raise InvalidStatusError(f"Unknown service status: {raw}")


class ServiceRequest(Base):
    """Service request database model."""

    __tablename__ = "service_requests"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    service_type = Column(String, nullable=False)
    delivery_date = Column(Date, nullable=True)
    additional_description = Column(String, nullable=True)
    admin_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    service_advisor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(SQLEnum(ServiceStatus), default=ServiceStatus.NEW, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    vehicle = relationship("Vehicle", back_populates="service_requests", lazy="joined")
    service_advisor = relationship("User", foreign_keys=[service_advisor_id], lazy="joined")
    admin = relationship("User", foreign_keys=[admin_id])
    bill = relationship("Bill", back_populates="service_request", uselist=False, cascade="all, delete-orphan")
