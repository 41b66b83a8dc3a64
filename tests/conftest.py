"""Shared test fixtures and helpers."""

from datetime import date, datetime, time, timezone
from typing import Any, Optional

import pytest

from booking_engine.config import BookingConfig
from booking_engine.dependencies import Dependencies
from booking_engine.repositories.memory import InMemoryRepository, in_memory_repositories
from booking_engine.schemas.entities import (
    Appointment,
    AppointmentStatus,
    Calendar,
    Customer,
    Organization,
    OwnerType,
    Service,
    TimeOff,
)

ORG_ID = "org-1"
MEMBER_ID = "member-1"
OTHER_MEMBER_ID = "member-2"
SERVICE_ID = "svc-1"
CALENDAR_ID = "cal-1"
CUSTOMER_ID = "cust-1"
RETURNING_EMAIL = "returning@example.com"

# 2025-03-17 is a Monday; the fixed clock sits one week earlier.
MONDAY = date(2025, 3, 17)
SUNDAY = date(2025, 3, 16)
FIXED_NOW = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    """UTC instant on ``day``."""
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def make_calendar(
    calendar_id: str = CALENDAR_ID,
    owner_id: str = MEMBER_ID,
    working_hours: Optional[dict[str, list[dict[str, str]]]] = None,
    buffer_time: int = 0,
) -> Calendar:
    """Helper to create a Calendar open Mondays 09:00-12:00 by default."""
    if working_hours is None:
        working_hours = {"monday": [{"start": "09:00", "end": "12:00"}]}
    return Calendar(
        id=calendar_id,
        owner_type=OwnerType.MEMBER,
        owner_id=owner_id,
        name="Test calendar",
        working_hours=working_hours,
        buffer_time=buffer_time,
    )


def make_service(
    service_id: str = SERVICE_ID,
    duration: int = 30,
    price: float = 50.0,
    owner_id: str = MEMBER_ID,
) -> Service:
    return Service(
        id=service_id,
        organization_id=ORG_ID,
        name="Consultation",
        price=price,
        duration=duration,
        owner_id=owner_id,
    )


def make_appointment(
    start: datetime,
    duration: int = 30,
    status: AppointmentStatus = AppointmentStatus.PENDING,
    calendar_id: str = CALENDAR_ID,
    appointment_id: Optional[str] = None,
) -> Appointment:
    return Appointment(
        id=appointment_id,
        organization_id=ORG_ID,
        calendar_id=calendar_id,
        assignee_type=OwnerType.MEMBER,
        assignee_id=MEMBER_ID,
        customer_id=CUSTOMER_ID,
        service_id=SERVICE_ID,
        title="Existing",
        start_time=start,
        duration=duration,
        fee=50.0,
        status=status,
    )


def make_time_off(
    start: datetime,
    end: datetime,
    owner_id: str = MEMBER_ID,
    time_off_id: Optional[str] = None,
) -> TimeOff:
    return TimeOff(id=time_off_id, owner_id=owner_id, start_at=start, end_at=end, reason="Break")


def make_booking_payload(**overrides: Any) -> dict[str, Any]:
    """Helper to create a camelCase booking payload with sensible defaults."""
    payload: dict[str, Any] = {
        "serviceId": SERVICE_ID,
        "customerEmail": "new@example.com",
        "customerName": "Jo Doe",
        "customerPhone": "+34 600 111 222",
        "organizationId": ORG_ID,
        "startTime": "2025-03-17T09:00:00.000Z",
        "assigneeId": MEMBER_ID,
    }
    payload.update(overrides)
    return payload


def store(repo: InMemoryRepository, entity: Any, organization_id: Optional[str] = ORG_ID) -> str:
    """Seed ``entity`` into ``repo`` keeping its id."""
    return repo.insert(entity.model_dump(by_alias=True), organization_id=organization_id)


@pytest.fixture
def repositories():
    repos = in_memory_repositories()
    store(repos.organizations, Organization(id=ORG_ID, name="Test Clinic"), organization_id=None)
    store(repos.services, make_service())
    store(repos.calendars, make_calendar())
    store(
        repos.customers,
        Customer(
            id=CUSTOMER_ID,
            organization_id=ORG_ID,
            email=RETURNING_EMAIL,
            name="Returning Customer",
            phone="+34600999888",
        ),
    )
    return repos


@pytest.fixture
def booking_config():
    return BookingConfig(
        slot_match_tolerance_seconds=60,
        hide_past_slots=True,
        default_description_template="Appointment for {service_name}",
    )


@pytest.fixture
def deps(repositories, booking_config):
    return Dependencies(
        repositories=repositories,
        clock=lambda: FIXED_NOW,
        config=booking_config,
    )
