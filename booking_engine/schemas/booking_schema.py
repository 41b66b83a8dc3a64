"""Booking and availability request/response models."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from booking_engine.schemas.entities import Calendar, Customer, OwnerType, Service
from booking_engine.utils import ensure_utc, format_instant, parse_instant


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class Timeslot(_WireModel):
    """A candidate or confirmed bookable window."""

    start: datetime
    end: datetime

    @field_serializer("start", "end", when_used="json")
    def _to_iso(self, value: datetime) -> str:
        return format_instant(value)


class BookingRequest(_WireModel):
    """Validated booking request payload."""

    service_id: str = Field(min_length=1)
    customer_email: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=1)
    customer_address: Optional[str] = None
    customer_notes: Optional[str] = None
    organization_id: str = Field(min_length=1)
    start_time: datetime
    assignee_id: str = Field(min_length=1)
    title: Optional[str] = None
    description: Optional[str] = None
    fee: Optional[float] = Field(default=None, ge=0)
    timezone: Optional[str] = None
    additional_customer_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("start_time", mode="before")
    @classmethod
    def _parse_start_time(cls, value: Any) -> datetime:
        if isinstance(value, datetime):
            return ensure_utc(value)
        if isinstance(value, str):
            try:
                return parse_instant(value)
            except ValueError:
                raise ValueError("Invalid start time format") from None
        raise ValueError("Invalid start time format")


class TimeslotQuery(_WireModel):
    """Available-timeslots request payload."""

    service_id: str = Field(min_length=1)
    date: date
    organization_id: str = Field(min_length=1)
    assignee_id: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                raise ValueError("Invalid date format, expected YYYY-MM-DD") from None
        return value


class ConfirmationDetails(_WireModel):
    """Data handed to confirmation-email and UI collaborators."""

    service: Service
    customer: Customer
    customer_id: str
    start_time: datetime
    end_time: datetime
    duration: int
    fee: Optional[float] = None

    @field_serializer("start_time", "end_time", when_used="json")
    def _to_iso(self, value: datetime) -> str:
        return format_instant(value)


class BookingResult(_WireModel):
    """Booking orchestrator response."""

    appointment_id: str
    confirmation_details: ConfirmationDetails


@dataclass(frozen=True)
class ValidationResult:
    """Everything the orchestrator needs once a booking request passed validation."""

    request: BookingRequest
    service: Service
    customer: Customer
    customer_id: str
    calendar: Calendar
    start_time: datetime
    end_time: datetime
    assignee_id: str
    assignee_type: OwnerType
