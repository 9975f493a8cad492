"""
SQLAlchemy database models.
"""
from service_center.models.user import User, UserRole
from service_center.models.customer import CustomerProfile
from service_center.models.vehicle import Vehicle
from service_center.models.service_request import ServiceRequest, ServiceStatus
from service_center.models.bill import Bill, BillItem, BillItemKind

__all__ = [
    "User", "UserRole",
    "CustomerProfile",
    "Vehicle",
    "ServiceRequest", "ServiceStatus",
    "Bill", "BillItem", "BillItemKind",
]
