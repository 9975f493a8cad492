"""
Bill generation, lookup and PDF export.

A bill is created when an advisor closes a service request. Generating a
bill always leaves the request in ``Completed`` status, and re-generating
replaces the totals and items of the existing bill while keeping its id.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from service_center.config import Settings, get_settings
from service_center.database import get_db
from service_center.exceptions import AccessDeniedError, NotFoundError
from service_center.models.bill import Bill, BillItem, BillItemKind
from service_center.models.service_request import ServiceRequest, ServiceStatus
from service_center.models.user import User, UserRole
from service_center.schemas.bill import BillRequest, BillResponse, LaborItem, MaterialItem
from service_center.services.email_service import EmailService, get_email_service
from service_center.services.pdf_renderer import BillPdfRenderer

logger = logging.getLogger(__name__)

BILL_EMAIL_TEMPLATE = """Dear {customer_name},

Your service bill for {vehicle_name} ({registration_number}) is now ready.

Bill ID: {bill_id}
Service Request ID: REQ-{request_id}
Total Amount: {currency} {grand_total:.2f}

You can download the bill from your customer portal or by visiting our service center.

Thank you for choosing {company}!

Best regards,
{company} Service Team
"""


class BillService:
    """Business logic for bills."""

    def __init__(
        self,
        db: AsyncSession,
        email_service: EmailService,
        pdf_renderer: Optional[BillPdfRenderer] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.email_service = email_service
        self.settings = settings or get_settings()
        self.pdf_renderer = pdf_renderer or BillPdfRenderer(self.settings)

    async def generate_bill(self, request_id: int, bill_request: BillRequest) -> BillResponse:
        """
        Close a service request and record its bill.

        Totals are stored exactly as submitted. When ``send_email`` is set
        the customer is mailed; a failed send only leaves ``email_sent``
        false.
        """
        logger.info("Generating bill for service request ID: %s", request_id)

        try:
            service_request = await self._get_service_request(request_id)

            if service_request.status != ServiceStatus.COMPLETED:
                logger.info(
                    "Moving service request %s from %s to Completed",
                    request_id, service_request.status.value,
                )
                service_request.status = ServiceStatus.COMPLETED

            self._check_totals(request_id, bill_request)

            bill = await self._find_bill(request_id)
            if bill is None:
                bill = Bill(request_id=request_id, items=[])
                self.db.add(bill)
            else:
                logger.info("Replacing existing bill %s for service request %s", bill.id, request_id)
                bill.items.clear()

            bill.materials_total = bill_request.materials_total
            bill.labor_total = bill_request.labor_total
            bill.subtotal = bill_request.subtotal
            bill.gst = bill_request.gst
            bill.grand_total = bill_request.grand_total
            bill.notes = bill_request.notes
            bill.generated_at = datetime.now(timezone.utc)
            bill.email_sent = False
            bill.items.extend(self._items_from_request(bill_request))

            # Flush so the database assigns the bill id
            await self.db.flush()

            response = self._to_response(service_request, bill)

            if bill_request.send_email:
                try:
                    await self._send_bill_email(response)
                    response.email_sent = True
                except Exception as e:
                    logger.error("Failed to send bill email: %s", e, exc_info=True)
                    response.email_sent = False

            bill.email_sent = response.email_sent
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return response

    async def get_bill_by_service_request(self, request_id: int, viewer: Optional[User] = None) -> BillResponse:
        """
        Return the stored bill for a service request.

        Customers may only read bills for their own vehicles.
        """
        service_request = await self._get_service_request(request_id)

        if viewer is not None and viewer.role == UserRole.CUSTOMER:
            if service_request.vehicle.customer.user_id != viewer.id:
                raise AccessDeniedError("You do not have access to this bill")

        bill = await self._find_bill(request_id)
        if bill is None:
            raise NotFoundError(f"No bill has been generated for service request {request_id}")

        return self._to_response(service_request, bill)

    async def generate_bill_pdf(self, request_id: int, viewer: Optional[User] = None) -> bytes:
        """Render the stored bill for a service request as PDF bytes."""
        bill = await self.get_bill_by_service_request(request_id, viewer)
        return self.pdf_renderer.render(bill)

    async def _get_service_request(self, request_id: int) -> ServiceRequest:
        result = await self.db.execute(select(ServiceRequest).where(ServiceRequest.id == request_id))
        service_request = result.scalar_one_or_none()
        if service_request is None:
            raise NotFoundError(f"Service request not found with ID: {request_id}")
        return service_request

    async def _find_bill(self, request_id: int) -> Optional[Bill]:
        result = await self.db.execute(select(Bill).where(Bill.request_id == request_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _check_totals(request_id: int, bill_request: BillRequest) -> None:
        # Stored as given; mismatches are only reported
        if bill_request.materials_total + bill_request.labor_total != bill_request.subtotal:
            logger.warning(
                "Bill for service request %s: subtotal %s != materials %s + labor %s",
                request_id, bill_request.subtotal, bill_request.materials_total, bill_request.labor_total,
            )
        if bill_request.subtotal + bill_request.gst != bill_request.grand_total:
            logger.warning(
                "Bill for service request %s: grand total %s != subtotal %s + GST %s",
                request_id, bill_request.grand_total, bill_request.subtotal, bill_request.gst,
            )

    @staticmethod
    def _items_from_request(bill_request: BillRequest) -> List[BillItem]:
        items = [
            BillItem(
                kind=BillItemKind.MATERIAL,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.total,
            )
            for item in bill_request.materials
        ]
        items.extend(
            BillItem(
                kind=BillItemKind.LABOR,
                description=item.description,
                quantity=item.hours,
                unit_price=item.rate_per_hour,
                total=item.total,
            )
            for item in bill_request.labor
        )
        return items

    def _to_response(self, service_request: ServiceRequest, bill: Bill) -> BillResponse:
        vehicle = service_request.vehicle
        user = vehicle.customer.user
        generated_at = bill.generated_at
        if generated_at.tzinfo is None:
            # SQLite drops the offset; stored times are UTC
            generated_at = generated_at.replace(tzinfo=timezone.utc)
        return BillResponse(
            bill_id=bill.id,
            request_id=service_request.id,
            vehicle_name=vehicle.display_name,
            registration_number=vehicle.registration_number,
            customer_name=user.full_name,
            customer_email=user.email,
            materials_total=bill.materials_total,
            labor_total=bill.labor_total,
            subtotal=bill.subtotal,
            gst=bill.gst,
            grand_total=bill.grand_total,
            generated_at=generated_at,
            notes=bill.notes,
            download_url=self.settings.bill_download_path.format(request_id=service_request.id),
            email_sent=bill.email_sent,
            materials=[
                MaterialItem(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=item.total,
                )
                for item in bill.items if item.kind == BillItemKind.MATERIAL
            ],
            labor=[
                LaborItem(
                    description=item.description,
                    hours=item.quantity,
                    rate_per_hour=item.unit_price,
                    total=item.total,
                )
                for item in bill.items if item.kind == BillItemKind.LABOR
            ],
        )

    async def _send_bill_email(self, bill: BillResponse) -> None:
        subject = f"{self.settings.company_name} - Service Bill for {bill.vehicle_name}"
        body = BILL_EMAIL_TEMPLATE.format(
            customer_name=bill.customer_name,
            vehicle_name=bill.vehicle_name,
            registration_number=bill.registration_number,
            bill_id=bill.bill_id,
            request_id=bill.request_id,
            currency=self.settings.currency_symbol,
            grand_total=bill.grand_total,
            company=self.settings.company_name,
        )
        await run_in_threadpool(
            self.email_service.send, bill.customer_email, subject, body, recipient_name=bill.customer_name
        )


def get_bill_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> BillService:
    return BillService(db, email_service)
