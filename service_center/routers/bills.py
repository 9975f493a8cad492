"""
Bill routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from service_center.auth import get_current_user, require_roles
from service_center.exceptions import AccessDeniedError, NotFoundError, PdfGenerationError
from service_center.models.user import User, UserRole
from service_center.schemas.bill import BillRequest, BillResponse
from service_center.services.bill_service import BillService, get_bill_service

router = APIRouter(prefix="/api/bills", tags=["bills"])


@router.post(
    "/service-request/{request_id}",
    response_model=BillResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_bill(
    request_id: int,
    bill_request: BillRequest,
    bill_service: BillService = Depends(get_bill_service),
    current_user: User = Depends(require_roles(UserRole.SERVICE_ADVISOR, UserRole.ADMIN))
):
    """
    Generate the bill for a service request and mark it completed.
    """
    try:
        return await bill_service.generate_bill(request_id, bill_request)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/service-request/{request_id}", response_model=BillResponse)
async def get_bill(
    request_id: int,
    bill_service: BillService = Depends(get_bill_service),
    current_user: User = Depends(get_current_user)
):
    """
    Get the bill of a service request.
    """
    try:
        return await bill_service.get_bill_by_service_request(request_id, current_user)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.get("/service-request/{request_id}/download")
async def download_bill(
    request_id: int,
    bill_service: BillService = Depends(get_bill_service),
    current_user: User = Depends(get_current_user)
):
    """
    Download the bill of a service request as a PDF.
    """
    try:
        pdf = await bill_service.generate_bill_pdf(request_id, current_user)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AccessDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except PdfGenerationError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="bill-REQ-{request_id}.pdf"'},
    )
