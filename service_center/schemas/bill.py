"""
Pydantic schemas for Bill.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, PlainSerializer

# Amounts stay Decimal in Python and are written to JSON as numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]
Amount = Annotated[Money, Field(ge=0, max_digits=12, decimal_places=2)]
Quantity = Annotated[Money, Field(gt=0, max_digits=10, decimal_places=2)]


class MaterialItem(BaseModel):
    """A part or consumable used on the job."""
    description: str = Field(..., min_length=1, examples=["Engine Oil"])
    quantity: Quantity
    unit_price: Amount
    total: Amount


class LaborItem(BaseModel):
    """A labor charge billed by the hour."""
    description: str = Field(..., min_length=1, examples=["Regular Service"])
    hours: Quantity
    rate_per_hour: Amount
    total: Amount


class BillRequest(BaseModel):
    """Totals and line items submitted by the advisor when closing a job."""
    materials_total: Amount
    labor_total: Amount
    subtotal: Amount
    gst: Amount
    grand_total: Amount
    notes: Optional[str] = None
    send_email: bool = False
    materials: List[MaterialItem] = []
    labor: List[LaborItem] = []


class BillResponse(BaseModel):
    """Bill as returned to clients and rendered to PDF."""
    bill_id: int
    request_id: int
    vehicle_name: str
    registration_number: str
    customer_name: str
    customer_email: str
    materials_total: Money
    labor_total: Money
    subtotal: Money
    gst: Money
    grand_total: Money
    generated_at: datetime
    notes: Optional[str] = None
    download_url: str
    email_sent: bool = False
    materials: List[MaterialItem] = []
    labor: List[LaborItem] = []
