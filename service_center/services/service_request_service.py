"""
Service request lookup and status changes for staff users.
"""
import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from service_center.auth import get_user_from_token
from service_center.database import get_db
from service_center.exceptions import AccessDeniedError, NotFoundError
from service_center.models.service_request import ServiceRequest, ServiceStatus
from service_center.models.user import User, UserRole
from service_center.schemas.service_request import ServiceRequestDto

logger = logging.getLogger(__name__)


class ServiceRequestService:
    """Read and progress service requests on behalf of the token holder."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_service_request_by_id(self, request_id: int, token: str) -> Optional[ServiceRequestDto]:
        """Return the request as a DTO, or ``None`` if it does not exist."""
        user = await get_user_from_token(self.db, token)
        service_request = await self._load(request_id)
        if service_request is None:
            return None

        if not can_view(user, service_request):
            raise AccessDeniedError(f"Service request {request_id} is not assigned to you")
        return ServiceRequestDto.from_entity(service_request)

    async def update_service_request_status(self, request_id: int, status: str, token: str) -> ServiceRequestDto:
        """
        Move a request to ``status``.

        ``status`` may be a value or a name in any case (``"InProgress"``,
        ``"in_progress"``). Unknown values raise ``InvalidStatusError``.
        """
        user = await get_user_from_token(self.db, token)
        new_status = ServiceStatus.parse(status)

        service_request = await self._load(request_id)
        if service_request is None:
            raise NotFoundError(f"Service request not found with ID: {request_id}")

        if not can_modify(user, service_request):
            raise AccessDeniedError(f"Service request {request_id} is not assigned to you")

        if service_request.status != new_status:
            logger.info(
                "Service request %s status %s -> %s by user %s",
                request_id, service_request.status.value, new_status.value, user.id,
            )
            service_request.status = new_status
            await self.db.commit()

        return ServiceRequestDto.from_entity(service_request)

    async def _load(self, request_id: int) -> Optional[ServiceRequest]:
        result = await self.db.execute(select(ServiceRequest).where(ServiceRequest.id == request_id))
        return result.scalar_one_or_none()


def can_view(user: User, service_request: ServiceRequest) -> bool:
    """Admins see everything; advisors see their own and unassigned requests."""
    if user.role == UserRole.ADMIN:
        return True
    if user.role == UserRole.SERVICE_ADVISOR:
        return service_request.service_advisor_id in (None, user.id)
    return False


def can_modify(user: User, service_request: ServiceRequest) -> bool:
    if user.role == UserRole.ADMIN:
        return True
    return user.role == UserRole.SERVICE_ADVISOR and service_request.service_advisor_id == user.id


def get_service_request_service(db: AsyncSession = Depends(get_db)) -> ServiceRequestService:
    return ServiceRequestService(db)
