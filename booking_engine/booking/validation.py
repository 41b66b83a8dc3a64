"""
Booking request validation.

Runs every check a booking must pass before anything is written, failing
fast on the first problem:

    payload schema -> organization -> service -> customer (find or create)
    -> assignee calendar -> future start -> working day -> conflicts

The only write that can happen here is creating a first-time customer.
A timezone refresh for a returning customer runs in the background and
never fails the booking.
"""

from datetime import timedelta
from typing import Any, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from booking_engine.availability.overlap import (
    conflicting_appointments,
    conflicting_time_offs,
    has_conflict,
)
from booking_engine.availability.query import find_owner_calendar, load_commitments
from booking_engine.availability.time_utils import day_of_week
from booking_engine.customers import build_customer_payload
from booking_engine.dependencies import Dependencies
from booking_engine.errors import (
    ConflictError,
    NotFoundError,
    OutsideBusinessHoursError,
    PastTimeError,
    ValidationError,
)
from booking_engine.logging_context import get_request_logger
from booking_engine.repositories.base import BookingRepositories, QueryConstraint
from booking_engine.schemas.booking_schema import BookingRequest, ValidationResult
from booking_engine.schemas.entities import Customer, Organization

logger = get_request_logger(__name__)


def parse_booking_request(payload: Union[BookingRequest, Mapping[str, Any]]) -> BookingRequest:
    """Schema-validate a raw booking payload.

    Raises:
        ValidationError: If required fields are missing or malformed.
    """
    if isinstance(payload, BookingRequest):
        return payload
    try:
        return BookingRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc, "booking request") from None


async def _patch_customer_timezone(
    repositories: BookingRepositories, customer_id: str, organization_id: str, timezone: str
) -> None:
    await repositories.customers.update(
        customer_id, {"timezone": timezone}, organization_id=organization_id
    )
    logger.info("Customer %s timezone updated to %s", customer_id, timezone)


async def resolve_customer(
    request: BookingRequest, organization: Organization, deps: Dependencies
) -> Customer:
    """Find the customer by exact email within the organization, creating one if absent."""
    repositories = deps.repositories
    matches = await repositories.customers.get_all(
        [QueryConstraint("email", "==", request.customer_email)],
        organization_id=request.organization_id,
    )

    if not matches:
        logger.info(
            "Customer does not exist, creating: email=%s organization=%s",
            request.customer_email, request.organization_id,
        )
        new_customer = build_customer_payload(
            organization,
            email=request.customer_email,
            name=request.customer_name,
            phone=request.customer_phone,
            address=request.customer_address,
            notes=request.customer_notes,
            timezone=request.timezone,
            custom_fields=request.additional_customer_fields,
        )
        customer_id = await repositories.customers.create(
            new_customer, organization_id=request.organization_id
        )
        return new_customer.model_copy(update={"id": customer_id})

    customer = matches[0]
    if request.timezone and request.timezone != customer.timezone:
        deps.background.spawn(
            _patch_customer_timezone(
                repositories, customer.id, request.organization_id, request.timezone
            ),
            name=f"customer-timezone-{customer.id}",
        )
        customer = customer.model_copy(update={"timezone": request.timezone})
    return customer


async def validate_booking_request(
    payload: Union[BookingRequest, Mapping[str, Any]],
    deps: Dependencies,
) -> ValidationResult:
    """
    Validate a booking request against stored state.

    Args:
        payload: booking request (model or raw camelCase mapping)
        deps: repositories, clock and background runner

    Returns:
        ValidationResult: service, customer, calendar and the requested interval.

    Raises:
        ValidationError, NotFoundError, PastTimeError,
        OutsideBusinessHoursError, ConflictError
    """
    request = parse_booking_request(payload)
    repositories = deps.repositories
    organization_id = request.organization_id

    organization = await repositories.organizations.get(organization_id)
    if organization is None:
        raise NotFoundError("organization", organization_id)

    service = await repositories.services.get(request.service_id, organization_id=organization_id)
    if service is None:
        raise NotFoundError("service", request.service_id)

    customer = await resolve_customer(request, organization, deps)

    calendar = await find_owner_calendar(repositories, request.assignee_id, organization_id)

    start_time = request.start_time
    end_time = start_time + timedelta(minutes=service.duration)

    if start_time <= deps.clock():
        raise PastTimeError(start_time)

    day = day_of_week(start_time)
    if not calendar.blocks_for(day):
        raise OutsideBusinessHoursError(day.value)

    appointments, time_offs = await load_commitments(
        repositories, calendar, request.assignee_id, organization_id
    )

    if has_conflict(start_time, end_time, appointments, time_offs, calendar.buffer_time):
        logger.info(
            "Booking conflict on calendar %s for %s - %s",
            calendar.id, start_time.isoformat(), end_time.isoformat(),
        )
        raise ConflictError(
            start_time,
            end_time,
            conflicting_appointments(start_time, end_time, appointments, calendar.buffer_time),
            conflicting_time_offs(start_time, end_time, time_offs),
        )

    return ValidationResult(
        request=request,
        service=service,
        customer=customer,
        customer_id=customer.id,
        calendar=calendar,
        start_time=start_time,
        end_time=end_time,
        assignee_id=request.assignee_id,
        assignee_type=calendar.owner_type,
    )
