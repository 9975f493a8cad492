"""
Service advisor dashboard: the HTML pages and the JSON endpoints the
dashboard calls.

Every endpoint accepts the token as a ``token`` query parameter, an
``Authorization: Bearer`` header or from the session (see
``resolve_token``).
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from service_center.auth import resolve_token
from service_center.exceptions import AccessDeniedError, AuthenticationError, InvalidStatusError, NotFoundError
from service_center.services.assignment_service import AssignmentService, get_assignment_service
from service_center.services.service_request_service import ServiceRequestService, get_service_request_service

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(prefix="/serviceAdvisor", tags=["service advisor"])


def _failure(exc: Exception, action: str) -> JSONResponse:
    """Turn an exception raised by a collaborator into an error response."""
    if isinstance(exc, AuthenticationError):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"error": str(exc)})
    if isinstance(exc, AccessDeniedError):
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": str(exc)})
    if isinstance(exc, NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})

    logger.error("Error %s: %s", action, exc, exc_info=True)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)})


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, error: Optional[str] = None):
    """Render the login page."""
    return templates.TemplateResponse(request, "serviceAdvisor/login.html", {"error": error})


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(request: Request, token: Optional[str] = None):
    """
    Render the dashboard, or send the browser to the login page when there
    is no token in the query string or session.
    """
    logger.info("Accessing service advisor dashboard")

    if resolve_token(request, token) is None:
        logger.warning("No valid token found, redirecting to login")
        return RedirectResponse(
            "/serviceAdvisor/login?error=session_expired",
            status_code=status.HTTP_302_FOUND,
        )

    first_name = request.session.get("firstName")
    last_name = request.session.get("lastName")
    user_name = f"{first_name} {last_name}" if first_name and last_name else "Service Advisor"

    return templates.TemplateResponse(request, "serviceAdvisor/dashboard.html", {"userName": user_name})


@router.get("/api/new-assignments")
async def get_new_assignments(
    request: Request,
    token: Optional[str] = None,
    authorization: Optional[str] = Header(None),
    assignment_service: AssignmentService = Depends(get_assignment_service)
):
    """New service requests waiting for the advisor."""
    valid_token = resolve_token(request, token, authorization)
    if valid_token is None:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=[])

    try:
        return await assignment_service.get_new_service_requests(valid_token)
    except Exception as e:
        return _failure(e, "fetching new service requests")


@router.get("/api/assigned-services")
async def get_assigned_services(
    request: Request,
    token: Optional[str] = None,
    authorization: Optional[str] = Header(None),
    assignment_service: AssignmentService = Depends(get_assignment_service)
):
    """Service requests the advisor is working on."""
    valid_token = resolve_token(request, token, authorization)
    if valid_token is None:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=[])

    try:
        return await assignment_service.get_assigned_requests(valid_token)
    except Exception as e:
        return _failure(e, "fetching assigned services")


@router.get("/api/service-details/{request_id}")
async def get_service_details(
    request_id: int,
    request: Request,
    token: Optional[str] = None,
    authorization: Optional[str] = Header(None),
    service_request_service: ServiceRequestService = Depends(get_service_request_service)
):
    """Full details of one service request."""
    valid_token = resolve_token(request, token, authorization)
    if valid_token is None:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={})

    try:
        service_dto = await service_request_service.get_service_request_by_id(request_id, valid_token)
        if service_dto is None:
            return Response(status_code=status.HTTP_404_NOT_FOUND)
        return service_dto.to_map()
    except Exception as e:
        return _failure(e, "fetching service details")


@router.put("/api/update-status/{request_id}")
async def update_service_status(
    request_id: int,
    request: Request,
    status_update: Optional[Dict[str, Any]] = Body(None),
    token: Optional[str] = None,
    authorization: Optional[str] = Header(None),
    service_request_service: ServiceRequestService = Depends(get_service_request_service)
):
    """Change the status of a service request. Body: ``{"status": "..."}``."""
    valid_token = resolve_token(request, token, authorization)
    if valid_token is None:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    new_status = (status_update or {}).get("status")
    if not isinstance(new_status, str) or not new_status.strip():
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Status is required"})

    try:
        updated_request = await service_request_service.update_service_request_status(
            request_id, new_status, valid_token
        )
    except InvalidStatusError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(e)})
    except Exception as e:
        return _failure(e, "updating service status")

    return {
        "success": True,
        "message": "Status updated successfully",
        "request": updated_request.to_map(),
    }


@router.post("/api/assign-service/{request_id}")
async def assign_service(
    request_id: int,
    request: Request,
    assignment_data: Optional[Dict[str, Any]] = Body(None),
    token: Optional[str] = None,
    authorization: Optional[str] = Header(None),
    assignment_service: AssignmentService = Depends(get_assignment_service)
):
    """Assign a service request to an advisor."""
    valid_token = resolve_token(request, token, authorization)
    if valid_token is None:
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        result = await assignment_service.assign_service(request_id, assignment_data or {}, valid_token)
    except Exception as e:
        return _failure(e, "assigning service")

    if "error" in result:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result)
    return result
