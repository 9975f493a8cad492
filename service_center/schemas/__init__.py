"""
Pydantic schemas for request/response validation.
"""
from service_center.schemas.user import User, LoginRequest, Token
from service_center.schemas.service_request import ServiceRequestDto
from service_center.schemas.bill import MaterialItem, LaborItem, BillRequest, BillResponse

__all__ = [
    "User", "LoginRequest", "Token",
    "ServiceRequestDto",
    "MaterialItem", "LaborItem", "BillRequest", "BillResponse",
]
