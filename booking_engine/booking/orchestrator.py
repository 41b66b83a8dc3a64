"""
Booking orchestration: validate, re-check availability, persist.

After validation passes, the day's open slots are regenerated from a fresh
read of the calendar's appointments and time-offs, and the requested start
must match one of them. This narrows the window in which two requests can
claim the same slot but does not close it: nothing locks the calendar
between the re-check and the write.
"""

from datetime import datetime
from typing import Any, Mapping, Optional, Union

from booking_engine.availability.query import load_commitments
from booking_engine.availability.slots import generate_timeslots
from booking_engine.booking.validation import validate_booking_request
from booking_engine.dependencies import Dependencies
from booking_engine.errors import NotFoundError, SlotUnavailableError
from booking_engine.logging_context import get_request_logger, set_request_id
from booking_engine.schemas.booking_schema import (
    BookingRequest,
    BookingResult,
    ConfirmationDetails,
    Timeslot,
)
from booking_engine.schemas.entities import Appointment, AppointmentStatus

logger = get_request_logger(__name__)


def _find_matching_slot(
    slots: list[Timeslot], requested: datetime, tolerance_seconds: int
) -> Optional[Timeslot]:
    for slot in slots:
        if abs((slot.start - requested).total_seconds()) <= tolerance_seconds:
            return slot
    return None


async def book_appointment(
    payload: Union[BookingRequest, Mapping[str, Any]],
    deps: Dependencies,
    *,
    request_id: Optional[str] = None,
) -> BookingResult:
    """
    Book an appointment.

    Args:
        payload: booking request (model or raw camelCase mapping)
        deps: repositories, clock, background runner and booking rules
        request_id: correlation id for log records

    Returns:
        BookingResult: the new appointment id plus confirmation details.

    Raises:
        Any validation error unchanged, or SlotUnavailableError when the
        requested start is no longer among the open slots.
    """
    if request_id:
        set_request_id(request_id)

    logger.info("Starting appointment booking")
    result = await validate_booking_request(payload, deps)
    request = result.request
    service = result.service
    calendar = result.calendar
    repositories = deps.repositories

    appointments, time_offs = await load_commitments(
        repositories, calendar, result.assignee_id, request.organization_id
    )
    open_slots = generate_timeslots(
        result.start_time.date(),
        calendar,
        service.duration,
        appointments,
        time_offs,
    )
    if _find_matching_slot(
        open_slots, result.start_time, deps.config.slot_match_tolerance_seconds
    ) is None:
        logger.warning(
            "Requested slot %s no longer open on calendar %s (%d open)",
            result.start_time.isoformat(), calendar.id, len(open_slots),
        )
        raise SlotUnavailableError(result.start_time)

    appointment = Appointment(
        organization_id=request.organization_id,
        calendar_id=calendar.id,
        assignee_type=result.assignee_type,
        assignee_id=result.assignee_id,
        customer_id=result.customer_id,
        service_id=service.id,
        title=request.title or service.name,
        description=request.description
        or deps.config.default_description_template.format(service_name=service.name),
        start_time=result.start_time,
        duration=service.duration,
        fee=request.fee if request.fee is not None else service.price,
        status=AppointmentStatus.PENDING,
    )
    appointment_id = await repositories.appointments.create(
        appointment, organization_id=request.organization_id
    )
    logger.info(
        "Appointment created: %s customer=%s service=%s",
        appointment_id, result.customer_id, service.id,
    )

    return BookingResult(
        appointment_id=appointment_id,
        confirmation_details=ConfirmationDetails(
            service=service,
            customer=result.customer,
            customer_id=result.customer_id,
            start_time=result.start_time,
            end_time=result.end_time,
            duration=service.duration,
            fee=appointment.fee,
        ),
    )


async def cancel_appointment(
    appointment_id: str,
    organization_id: str,
    deps: Dependencies,
) -> Appointment:
    """Mark an appointment cancelled so its slot opens up again.

    Raises:
        NotFoundError: If the appointment does not exist.
    """
    repositories = deps.repositories
    appointment = await repositories.appointments.get(
        appointment_id, organization_id=organization_id
    )
    if appointment is None:
        raise NotFoundError("appointment", appointment_id)
    if appointment.is_cancelled:
        return appointment

    await repositories.appointments.update(
        appointment_id,
        {"status": AppointmentStatus.CANCELLED.value},
        organization_id=organization_id,
    )
    logger.info("Appointment cancelled: %s", appointment_id)
    return appointment.model_copy(update={"status": AppointmentStatus.CANCELLED})
