import unittest
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from sqlalchemy import select

from service_center.exceptions import AccessDeniedError, EmailDeliveryError, NotFoundError, PdfGenerationError
from service_center.models import Bill, ServiceRequest, ServiceStatus, User
from service_center.schemas.bill import BillRequest
from service_center.services.bill_service import BillService
from tests.support import DatabaseTestCase


class FakeEmailService:
    def __init__(self, error=None):
        self.error = error
        self.sent = []
        self.recipient_names = []

    def send(self, to, subject, body, recipient_name=None):
        self.sent.append((to, subject, body))
        self.recipient_names.append(recipient_name)
        if self.error:
            raise self.error
        return "message-id"


def bill_request(**overrides):
    values = dict(
        materials_total=Decimal("4400.00"),
        labor_total=Decimal("1200.00"),
        subtotal=Decimal("5600.00"),
        gst=Decimal("1008.00"),
        grand_total=Decimal("6608.00"),
        notes="Service completed as per requirements.",
        materials=[
            {"description": "Engine Oil", "quantity": "4", "unit_price": "850.00", "total": "3400.00"},
            {"description": "Air Filter", "quantity": "1", "unit_price": "1000.00", "total": "1000.00"},
        ],
        labor=[
            {"description": "Regular Service", "hours": "2", "rate_per_hour": "600.00", "total": "1200.00"},
        ],
    )
    values.update(overrides)
    return BillRequest(**values)


class BillServiceTestCase(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.email = FakeEmailService()

    def call(self, method, *args):
        async def runner(session):
            return await getattr(BillService(session, self.email), method)(*args)
        return self.with_session(runner)

    def load_request(self, request_id):
        async def runner(session):
            return await session.get(ServiceRequest, request_id)
        return self.with_session(runner)

    def load_bills(self):
        async def runner(session):
            result = await session.execute(select(Bill))
            return result.scalars().all()
        return self.with_session(runner)

    def load_user(self, user_id):
        async def runner(session):
            return await session.get(User, user_id)
        return self.with_session(runner)


class TestGenerateBill(BillServiceTestCase):
    def test_sets_status_completed_from_any_status(self):
        for request_id in (self.fx.new_request_id, self.fx.in_progress_request_id, self.fx.unassigned_request_id):
            self.call("generate_bill", request_id, bill_request())
            self.assertEqual(self.load_request(request_id).status, ServiceStatus.COMPLETED)

    def test_regenerating_is_idempotent(self):
        first = self.call("generate_bill", self.fx.completed_request_id, bill_request())
        second = self.call("generate_bill", self.fx.completed_request_id, bill_request(notes="Revised"))

        self.assertEqual(first.bill_id, second.bill_id)
        self.assertEqual(self.load_request(self.fx.completed_request_id).status, ServiceStatus.COMPLETED)
        bills = self.load_bills()
        self.assertEqual(len(bills), 1)
        self.assertEqual(bills[0].notes, "Revised")
        self.assertEqual(len(bills[0].items), 3)

    def test_copies_amounts_unchanged(self):
        payload = bill_request(
            materials_total=Decimal("1234.56"),
            labor_total=Decimal("0.01"),
            subtotal=Decimal("1234.57"),
            gst=Decimal("222.22"),
            grand_total=Decimal("1456.79"),
        )
        response = self.call("generate_bill", self.fx.new_request_id, payload)

        for field in ("materials_total", "labor_total", "subtotal", "gst", "grand_total"):
            self.assertEqual(str(getattr(response, field)), str(getattr(payload, field)), field)
        self.assertEqual(response.notes, payload.notes)

    def test_response_describes_request(self):
        response = self.call("generate_bill", self.fx.new_request_id, bill_request())

        self.assertEqual(response.request_id, self.fx.new_request_id)
        self.assertEqual(response.vehicle_name, "Honda City")
        self.assertEqual(response.registration_number, "KA01AB1234")
        self.assertEqual(response.customer_name, "John Smith")
        self.assertEqual(response.customer_email, "john@example.com")
        self.assertEqual(
            response.download_url,
            f"/api/bills/service-request/{self.fx.new_request_id}/download",
        )
        self.assertEqual([item.description for item in response.materials], ["Engine Oil", "Air Filter"])
        self.assertEqual(response.labor[0].hours, Decimal("2"))
        self.assertFalse(response.email_sent)
        self.assertEqual(self.email.sent, [])

    def test_bill_ids_are_unique(self):
        ids = {
            self.call("generate_bill", request_id, bill_request()).bill_id
            for request_id in (self.fx.new_request_id, self.fx.in_progress_request_id, self.fx.other_request_id)
        }
        self.assertEqual(len(ids), 3)

    def test_sends_email_when_requested(self):
        response = self.call("generate_bill", self.fx.new_request_id, bill_request(send_email=True))

        self.assertTrue(response.email_sent)
        to, subject, body = self.email.sent[0]
        self.assertEqual(to, "john@example.com")
        self.assertEqual(subject, "Albany Motors - Service Bill for Honda City")
        self.assertIn(f"REQ-{self.fx.new_request_id}", body)
        self.assertIn("6608.00", body)
        self.assertEqual(self.email.recipient_names, ["John Smith"])
        self.assertTrue(self.load_bills()[0].email_sent)

    def test_email_failure_is_not_propagated(self):
        self.email = FakeEmailService(error=EmailDeliveryError("provider down"))
        response = self.call("generate_bill", self.fx.new_request_id, bill_request(send_email=True))

        self.assertFalse(response.email_sent)
        self.assertEqual(self.load_request(self.fx.new_request_id).status, ServiceStatus.COMPLETED)
        bills = self.load_bills()
        self.assertEqual(len(bills), 1)
        self.assertFalse(bills[0].email_sent)

    def test_unknown_request(self):
        with self.assertRaises(NotFoundError):
            self.call("generate_bill", 9999, bill_request())
        self.assertEqual(self.load_bills(), [])

    def test_rejects_more_than_two_decimal_places(self):
        with self.assertRaises(ValueError):
            bill_request(gst=Decimal("1008.005"))

    def test_rejects_negative_amounts(self):
        with self.assertRaises(ValueError):
            bill_request(labor_total=Decimal("-1.00"))


class TestGetBill(BillServiceTestCase):
    def test_returns_stored_bill(self):
        generated = self.call("generate_bill", self.fx.new_request_id, bill_request())
        stored = self.call("get_bill_by_service_request", self.fx.new_request_id)

        self.assertEqual(stored.bill_id, generated.bill_id)
        self.assertEqual(stored.grand_total, Decimal("6608.00"))
        self.assertEqual(stored.materials[0].unit_price, Decimal("850.00"))
        self.assertEqual(stored.labor[0].description, "Regular Service")

    def test_generated_at_survives_reload(self):
        generated = self.call("generate_bill", self.fx.new_request_id, bill_request())
        stored = self.call("get_bill_by_service_request", self.fx.new_request_id)

        self.assertEqual(stored.generated_at.utcoffset(), timedelta(0))
        self.assertEqual(stored.generated_at, generated.generated_at)

    def test_no_bill_yet(self):
        with self.assertRaises(NotFoundError):
            self.call("get_bill_by_service_request", self.fx.new_request_id)

    def test_unknown_request(self):
        with self.assertRaises(NotFoundError):
            self.call("get_bill_by_service_request", 9999)

    def test_customer_can_only_read_own_bills(self):
        self.call("generate_bill", self.fx.other_request_id, bill_request())
        john = self.load_user(self.fx.customer_user_id)

        with self.assertRaises(AccessDeniedError):
            self.call("get_bill_by_service_request", self.fx.other_request_id, john)

    def test_customer_reads_own_bill(self):
        self.call("generate_bill", self.fx.new_request_id, bill_request())
        john = self.load_user(self.fx.customer_user_id)

        bill = self.call("get_bill_by_service_request", self.fx.new_request_id, john)
        self.assertEqual(bill.customer_name, "John Smith")


class TestBillPdf(BillServiceTestCase):
    def test_renders_pdf(self):
        self.call("generate_bill", self.fx.new_request_id, bill_request(notes="Brakes <front> & rear"))
        pdf = self.call("generate_bill_pdf", self.fx.new_request_id)

        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertGreater(len(pdf), 1000)

    def test_renders_without_line_items_or_notes(self):
        self.call("generate_bill", self.fx.new_request_id, bill_request(materials=[], labor=[], notes=None))
        pdf = self.call("generate_bill_pdf", self.fx.new_request_id)
        self.assertTrue(pdf.startswith(b"%PDF"))

    def test_render_failure_is_wrapped(self):
        self.call("generate_bill", self.fx.new_request_id, bill_request())
        with mock.patch(
            "service_center.services.pdf_renderer.SimpleDocTemplate.build",
            side_effect=ValueError("layout error"),
        ):
            with self.assertRaises(PdfGenerationError) as ctx:
                self.call("generate_bill_pdf", self.fx.new_request_id)
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_no_bill_to_render(self):
        with self.assertRaises(NotFoundError):
            self.call("generate_bill_pdf", self.fx.new_request_id)


if __name__ == "__main__":
    unittest.main()
