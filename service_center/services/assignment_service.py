"""
Assignment of service requests to service advisors and the advisor
work queues shown on the dashboard.
"""
import logging
from typing import Any, Dict, List

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from service_center.auth import get_user_from_token
from service_center.database import get_db
from service_center.exceptions import AccessDeniedError
from service_center.models.service_request import ServiceRequest, ServiceStatus
from service_center.models.user import User, UserRole
from service_center.schemas.service_request import ServiceRequestDto

logger = logging.getLogger(__name__)

STAFF_ROLES = (UserRole.SERVICE_ADVISOR, UserRole.ADMIN)


class AssignmentService:
    """Advisor queues and request assignment."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_new_service_requests(self, token: str) -> List[Dict[str, Any]]:
        """New requests assigned to the advisor, or every new request for admins."""
        user = await self._staff_user(token)
        query = select(ServiceRequest).where(ServiceRequest.status == ServiceStatus.NEW)
        if user.role == UserRole.SERVICE_ADVISOR:
            query = query.where(ServiceRequest.service_advisor_id == user.id)
        return await self._as_maps(query)

    async def get_assigned_requests(self, token: str) -> List[Dict[str, Any]]:
        """In-progress requests of the advisor, or every assigned in-progress request for admins."""
        user = await self._staff_user(token)
        query = select(ServiceRequest).where(ServiceRequest.status == ServiceStatus.IN_PROGRESS)
        if user.role == UserRole.SERVICE_ADVISOR:
            query = query.where(ServiceRequest.service_advisor_id == user.id)
        else:
            query = query.where(ServiceRequest.service_advisor_id.is_not(None))
        return await self._as_maps(query)

    async def assign_service(self, request_id: int, assignment_data: Dict[str, Any], token: str) -> Dict[str, Any]:
        """
        Assign a request to a service advisor.

        ``assignment_data`` may carry ``serviceAdvisorId`` (defaults to the
        caller when the caller is an advisor) and ``additionalDescription``.
        Validation problems are returned as ``{"error": message}``.
        """
        user = await self._staff_user(token)

        result = await self.db.execute(select(ServiceRequest).where(ServiceRequest.id == request_id))
        service_request = result.scalar_one_or_none()
        if service_request is None:
            return {"error": f"Service request not found with ID: {request_id}"}

        if service_request.status == ServiceStatus.COMPLETED:
            return {"error": "Cannot assign a completed service request"}

        advisor_id = assignment_data.get("serviceAdvisorId")
        if advisor_id is None:
            if user.role != UserRole.SERVICE_ADVISOR:
                return {"error": "serviceAdvisorId is required"}
            advisor_id = user.id

        try:
            advisor_id = int(advisor_id)
        except (TypeError, ValueError):
            return {"error": "serviceAdvisorId must be an integer"}

        if user.role == UserRole.SERVICE_ADVISOR and advisor_id != user.id:
            return {"error": "Service advisors can only assign requests to themselves"}

        advisor = await self.db.get(User, advisor_id)
        if advisor is None or advisor.role != UserRole.SERVICE_ADVISOR or not advisor.is_active:
            return {"error": f"Service advisor not found with ID: {advisor_id}"}

        service_request.service_advisor = advisor
        if user.role == UserRole.ADMIN:
            service_request.admin_id = user.id

        description = assignment_data.get("additionalDescription")
        if description:
            service_request.additional_description = str(description)

        await self.db.commit()
        logger.info("Service request %s assigned to advisor %s by user %s", request_id, advisor.id, user.id)

        return {
            "success": True,
            "message": "Service assigned successfully",
            "request": ServiceRequestDto.from_entity(service_request).to_map(),
        }

    async def _staff_user(self, token: str) -> User:
        user = await get_user_from_token(self.db, token)
        if user.role not in STAFF_ROLES:
            raise AccessDeniedError("Only service advisors and admins can manage assignments")
        return user

    async def _as_maps(self, query) -> List[Dict[str, Any]]:
        result = await self.db.execute(query.order_by(ServiceRequest.id))
        return [ServiceRequestDto.from_entity(sr).to_map() for sr in result.scalars().all()]


def get_assignment_service(db: AsyncSession = Depends(get_db)) -> AssignmentService:
    return AssignmentService(db)
