"""
Pydantic schemas for ServiceRequest projections.
"""
from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ServiceRequestDto(BaseModel):
    """
    Flat projection of a service request with its vehicle, customer and
    assignment. ``to_map`` produces the camelCase dictionary returned by the
    dashboard endpoints.
    """
    request_id: int
    vehicle_id: Optional[int] = None
    vehicle_brand: Optional[str] = None
    vehicle_model: Optional[str] = None
    registration_number: Optional[str] = None
    service_type: Optional[str] = None
    delivery_date: Optional[date] = None
    additional_description: Optional[str] = None
    admin_id: Optional[int] = None
    service_advisor_id: Optional[int] = None
    service_advisor_name: Optional[str] = None
    status: Optional[str] = None
    customer_name: Optional[str] = None
    customer_id: Optional[int] = None
    membership_status: Optional[str] = None
    customer_email: Optional[str] = None
    vehicle_category: Optional[str] = None
    vehicle_name: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_entity(cls, service_request) -> "ServiceRequestDto":
        vehicle = service_request.vehicle
        customer = vehicle.customer if vehicle else None
        user = customer.user if customer else None
        advisor = service_request.service_advisor
        return cls(
            request_id=service_request.id,
            vehicle_id=vehicle.id if vehicle else None,
            vehicle_brand=vehicle.brand if vehicle else None,
            vehicle_model=vehicle.model if vehicle else None,
            registration_number=vehicle.registration_number if vehicle else None,
            service_type=service_request.service_type,
            delivery_date=service_request.delivery_date,
            additional_description=service_request.additional_description,
            admin_id=service_request.admin_id,
            service_advisor_id=service_request.service_advisor_id,
            service_advisor_name=advisor.full_name if advisor else None,
            status=service_request.status.value if service_request.status else None,
            customer_name=user.full_name if user else None,
            customer_id=customer.id if customer else None,
            membership_status=customer.membership_status if customer else None,
            customer_email=user.email if user else None,
            vehicle_category=vehicle.category if vehicle else None,
            vehicle_name=vehicle.display_name if vehicle else None,
        )

    def to_map(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
