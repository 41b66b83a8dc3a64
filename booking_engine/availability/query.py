"""
Public available-timeslots query.

Backs both the dashboard "available slots" view and the embeddable booking
widget: loads the service, the owner's calendar and commitments, then
delegates to the slot generator.
"""

from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from booking_engine.availability.slots import generate_timeslots
from booking_engine.dependencies import Dependencies
from booking_engine.errors import NotFoundError, ValidationError
from booking_engine.logging_context import get_request_logger, set_request_id
from booking_engine.repositories.base import BookingRepositories, QueryConstraint
from booking_engine.schemas.booking_schema import Timeslot, TimeslotQuery
from booking_engine.schemas.entities import (
    Appointment,
    AppointmentStatus,
    Calendar,
    TimeOff,
)

logger = get_request_logger(__name__)


async def find_owner_calendar(
    repositories: BookingRepositories, owner_id: str, organization_id: str
) -> Calendar:
    """First calendar whose ``ownerId`` matches. Owner type is not checked.

    Raises:
        NotFoundError: If the owner has no calendar.
    """
    calendars = await repositories.calendars.get_all(
        [QueryConstraint("ownerId", "==", owner_id)],
        organization_id=organization_id,
    )
    if not calendars:
        logger.error("Calendar not found for owner %s", owner_id)
        raise NotFoundError("calendar", owner_id)
    return calendars[0]


async def load_commitments(
    repositories: BookingRepositories,
    calendar: Calendar,
    owner_id: str,
    organization_id: str,
) -> tuple[list[Appointment], list[TimeOff]]:
    """Non-cancelled appointments on ``calendar`` and every time-off of ``owner_id``."""
    appointments = await repositories.appointments.get_all(
        [
            QueryConstraint("calendarId", "==", calendar.id),
            QueryConstraint("status", "!=", AppointmentStatus.CANCELLED.value),
        ],
        organization_id=organization_id,
    )
    time_offs = await repositories.time_offs.get_all(
        [QueryConstraint("ownerId", "==", owner_id)],
        organization_id=organization_id,
    )
    return appointments, time_offs


async def get_available_timeslots(
    payload: Union[TimeslotQuery, Mapping[str, Any]],
    deps: Dependencies,
    *,
    request_id: Optional[str] = None,
) -> list[Timeslot]:
    """
    Return the open slots for a service on one date.

    Args:
        payload: ``{serviceId, date: "YYYY-MM-DD", organizationId[, assigneeId]}``
        deps: repositories, clock and booking rules
        request_id: correlation id for log records

    Returns:
        list[Timeslot]: chronological within each working-hours block.

    Raises:
        ValidationError: malformed payload
        NotFoundError: missing service or calendar
    """
    if request_id:
        set_request_id(request_id)

    if isinstance(payload, TimeslotQuery):
        query = payload
    else:
        try:
            query = TimeslotQuery.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, "timeslot query") from None

    logger.info(
        "Timeslot query: service=%s date=%s organization=%s",
        query.service_id, query.date.isoformat(), query.organization_id,
    )
    repositories = deps.repositories

    service = await repositories.services.get(
        query.service_id, organization_id=query.organization_id
    )
    if service is None:
        logger.error("Service not found: %s", query.service_id)
        raise NotFoundError("service", query.service_id)

    owner_id = query.assignee_id or service.owner_id
    calendar = await find_owner_calendar(repositories, owner_id, query.organization_id)
    appointments, time_offs = await load_commitments(
        repositories, calendar, owner_id, query.organization_id
    )

    not_before = deps.clock() if deps.config.hide_past_slots else None
    slots = generate_timeslots(
        query.date,
        calendar,
        service.duration,
        appointments,
        time_offs,
        not_before=not_before,
    )
    logger.info(
        "Found %d open slot(s) for service %s on %s",
        len(slots), service.id, query.date.isoformat(),
    )
    return slots
