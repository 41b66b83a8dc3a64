"""Exception taxonomy for availability and booking operations.

Every error is terminal for the current request. Callers (HTTP or
callable-function wrappers) translate them to transport responses using
``code`` and ``to_dict()``; ``message`` is meant to be shown verbatim.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError


class BookingError(Exception):
    """Base exception for all booking engine errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for a JSON error response."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


class ValidationError(BookingError):
    """Malformed or missing payload fields."""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        self.errors = errors or []
        details = {"validation_errors": self.errors} if self.errors else {}
        super().__init__(message=message, code="VALIDATION_ERROR", details=details)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError, subject: str) -> "ValidationError":
        """Flatten a pydantic error into field/message pairs."""
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or subject,
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        return cls(f"Invalid {subject}: {summary}", errors=errors)


class NotFoundError(BookingError):
    """An entity lookup returned nothing."""

    def __init__(self, resource: str, resource_id: Optional[str] = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        message = f"{resource.capitalize()} not found"
        if resource_id:
            message += f": {resource_id}"
        details: dict[str, Any] = {"resource": resource}
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, code="NOT_FOUND", details=details)


class PastTimeError(BookingError):
    """Requested start time is not strictly in the future."""

    def __init__(self, start_time: datetime) -> None:
        self.start_time = start_time
        super().__init__(
            message="Cannot book appointments in the past",
            code="PAST_TIME",
            details={"start_time": start_time.isoformat()},
        )


class OutsideBusinessHoursError(BookingError):
    """The calendar defines no working hours for the requested day."""

    def __init__(self, day: str) -> None:
        self.day = day
        super().__init__(
            message=f"No working hours defined for {day}",
            code="OUTSIDE_BUSINESS_HOURS",
            details={"day": day},
        )


class ConflictError(BookingError):
    """Requested interval overlaps an appointment (plus buffer) or a time-off."""

    def __init__(
        self,
        start: datetime,
        end: datetime,
        conflicting_appointments: Optional[list[Any]] = None,
        conflicting_time_offs: Optional[list[Any]] = None,
    ) -> None:
        self.start = start
        self.end = end
        self.conflicting_appointments = list(conflicting_appointments or [])
        self.conflicting_time_offs = list(conflicting_time_offs or [])
        super().__init__(
            message="The requested time slot conflicts with existing appointments or time-off",
            code="CONFLICT",
            details={
                "requested_start": start.isoformat(),
                "requested_end": end.isoformat(),
                "conflicting_appointment_ids": [
                    getattr(a, "id", None) for a in self.conflicting_appointments
                ],
                "conflicting_time_off_ids": [
                    getattr(t, "id", None) for t in self.conflicting_time_offs
                ],
            },
        )


class SlotUnavailableError(BookingError):
    """The requested slot vanished between display and commit."""

    def __init__(self, start_time: datetime) -> None:
        self.start_time = start_time
        super().__init__(
            message="Requested time slot is no longer available",
            code="SLOT_UNAVAILABLE",
            details={"start_time": start_time.isoformat()},
        )
