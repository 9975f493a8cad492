"""
Bill and bill item models for database.
"""
from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from service_center.database import Base
import enum


class BillItemKind(str, enum.Enum):
    """Line item category."""
    MATERIAL = "material"
    LABOR = "labor"


class Bill(Base):
    """Bill generated for a completed service request."""

    __tablename__ = "bills"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("service_requests.id", ondelete="CASCADE"), unique=True, nullable=False)
    materials_total = Column(Numeric(12, 2), nullable=False)
    labor_total = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    gst = Column(Numeric(12, 2), nullable=False)
    grand_total = Column(Numeric(12, 2), nullable=False)
    notes = Column(String, nullable=True)
    email_sent = Column(Boolean, default=False, nullable=False)
    generated_at = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    service_request = relationship("ServiceRequest", back_populates="bill")
    items = relationship(
        "BillItem",
        back_populates="bill",
        cascade="all, delete-orphan",
        order_by="BillItem.id",
        lazy="selectin",
    )


class BillItem(Base):
    """Material or labor line on a bill. Labor stores hours in quantity and rate in unit_price."""

    __tablename__ = "bill_items"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("bills.id", ondelete="CASCADE"), nullable=False)
    kind = Column(SQLEnum(BillItemKind), nullable=False)
    description = Column(String, nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    bill = relationship("Bill", back_populates="items")
