"""
Create demo users, a vehicle and service requests so the API can be tried
out locally.

    python -m service_center.seed
"""
import asyncio
import logging
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from service_center.auth import hash_password
from service_center.config import get_settings
from service_center.database import SessionLocal, init_db
from service_center.logging_config import setup_logging
from service_center.models import CustomerProfile, ServiceRequest, ServiceStatus, User, UserRole, Vehicle

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


async def seed_demo_data(session: AsyncSession) -> bool:
    """Insert the demo records unless the admin user already exists. Returns True if seeded."""
    result = await session.execute(select(User).where(User.email == "admin@albanymotors.com"))
    if result.scalar_one_or_none():
        logger.info("Demo data already present")
        return False

    hashed = hash_password(DEMO_PASSWORD)
    admin = User(first_name="Ada", last_name="Admin", email="admin@albanymotors.com",
                 hashed_password=hashed, role=UserRole.ADMIN)
    advisor = User(first_name="Sam", last_name="Advisor", email="advisor@albanymotors.com",
                   hashed_password=hashed, role=UserRole.SERVICE_ADVISOR)
    customer_user = User(first_name="John", last_name="Smith", email="john.smith@email.com",
                         hashed_password=hashed, role=UserRole.CUSTOMER)
    customer = CustomerProfile(user=customer_user, phone="555-0101", address="123 Main St",
                               membership_status="premium")
    vehicle = Vehicle(customer=customer, brand="Honda", model="City",
                      registration_number="KA05MN4321", category="Car", year=2021)

    session.add_all([
        admin,
        advisor,
        customer,
        vehicle,
        ServiceRequest(vehicle=vehicle, service_type="General Service",
                       delivery_date=date.today() + timedelta(days=2),
                       additional_description="Oil change and filter replacement",
                       service_advisor=advisor, status=ServiceStatus.NEW),
        ServiceRequest(vehicle=vehicle, service_type="Brake Inspection",
                       delivery_date=date.today() + timedelta(days=1),
                       service_advisor=advisor, status=ServiceStatus.IN_PROGRESS),
        ServiceRequest(vehicle=vehicle, service_type="Wheel Alignment", status=ServiceStatus.NEW),
    ])
    await session.commit()
    logger.info("Demo data created; every demo user has password %r", DEMO_PASSWORD)
    return True


async def main() -> None:
    await init_db()
    async with SessionLocal() as session:
        await seed_demo_data(session)


def run() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    asyncio.run(main())


if __name__ == "__main__":
    run()
