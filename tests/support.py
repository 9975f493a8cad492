"""
Shared fixtures: a throwaway SQLite database per test and a small
service-center world of users, vehicles and service requests.
"""
import asyncio
import shutil
import tempfile
import unittest
from types import SimpleNamespace

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from service_center.auth import create_access_token, hash_password
from service_center.database import get_db, init_db
from service_center.main import app
from service_center.models import CustomerProfile, ServiceRequest, ServiceStatus, User, UserRole, Vehicle

PASSWORD = "secret123"
HASHED_PASSWORD = hash_password(PASSWORD)


async def build_fixtures(session) -> SimpleNamespace:
    def user(first, last, email, role):
        return User(first_name=first, last_name=last, email=email,
                    hashed_password=HASHED_PASSWORD, role=role)

    admin = user("Ada", "Admin", "admin@example.com", UserRole.ADMIN)
    advisor = user("Sam", "Advisor", "sam@example.com", UserRole.SERVICE_ADVISOR)
    other_advisor = user("Olive", "Other", "olive@example.com", UserRole.SERVICE_ADVISOR)
    customer_user = user("John", "Smith", "john@example.com", UserRole.CUSTOMER)
    other_customer_user = user("Jane", "Doe", "jane@example.com", UserRole.CUSTOMER)

    customer = CustomerProfile(user=customer_user, phone="555-0101", membership_status="premium")
    other_customer = CustomerProfile(user=other_customer_user, phone="555-0102")
    vehicle = Vehicle(customer=customer, brand="Honda", model="City",
                      registration_number="KA01AB1234", category="Car", year=2021)
    other_vehicle = Vehicle(customer=other_customer, brand="Toyota", model="Corolla",
                            registration_number="KA02CD5678", category="Car")

    def request(target, service_type, status, assigned_to=None):
        return ServiceRequest(vehicle=target, service_type=service_type, status=status,
                              service_advisor=assigned_to)

    new_request = request(vehicle, "General Service", ServiceStatus.NEW, advisor)
    in_progress_request = request(vehicle, "Brake Inspection", ServiceStatus.IN_PROGRESS, advisor)
    unassigned_request = request(vehicle, "Wheel Alignment", ServiceStatus.NEW)
    other_request = request(other_vehicle, "AC Repair", ServiceStatus.NEW, other_advisor)
    other_in_progress_request = request(other_vehicle, "Battery Check", ServiceStatus.IN_PROGRESS, other_advisor)
    completed_request = request(vehicle, "Engine Tune", ServiceStatus.COMPLETED, advisor)

    session.add_all([
        admin, advisor, other_advisor, customer, other_customer, vehicle, other_vehicle,
        new_request, in_progress_request, unassigned_request, other_request,
        other_in_progress_request, completed_request,
    ])
    await session.commit()

    return SimpleNamespace(
        admin_id=admin.id,
        advisor_id=advisor.id,
        other_advisor_id=other_advisor.id,
        customer_user_id=customer_user.id,
        new_request_id=new_request.id,
        in_progress_request_id=in_progress_request.id,
        unassigned_request_id=unassigned_request.id,
        other_request_id=other_request.id,
        other_in_progress_request_id=other_in_progress_request.id,
        completed_request_id=completed_request.id,
        admin_token=create_access_token(admin),
        advisor_token=create_access_token(advisor),
        other_advisor_token=create_access_token(other_advisor),
        customer_token=create_access_token(customer_user),
        other_customer_token=create_access_token(other_customer_user),
    )


class DatabaseTestCase(unittest.TestCase):
    """Gives each test a fresh file-backed SQLite database with fixtures loaded."""

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.engine = create_async_engine(
            f"sqlite+aiosqlite:///{self.tmpdir}/test.db", poolclass=NullPool
        )
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
        self.run_async(init_db(self.engine))
        self.fx = self.run_async(self._load_fixtures())

    def tearDown(self):
        self.run_async(self.engine.dispose())
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    @staticmethod
    def run_async(coro):
        return asyncio.run(coro)

    async def _load_fixtures(self):
        async with self.sessionmaker() as session:
            return await build_fixtures(session)

    def with_session(self, func):
        """Run ``func(session)`` in a new session and return its result."""
        async def runner():
            async with self.sessionmaker() as session:
                return await func(session)
        return self.run_async(runner())


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient wired to the test database."""

    def setUp(self):
        super().setUp()

        async def override_get_db():
            async with self.sessionmaker() as session:
                yield session

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        super().tearDown()

    @staticmethod
    def bearer(token):
        return {"Authorization": f"Bearer {token}"}
