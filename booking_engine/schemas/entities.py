"""Stored entities: organizations, services, calendars, time-offs, appointments, customers.

Field names are snake_case in Python and camelCase on the wire
(``bufferTime``, ``startAt`` ...). Instants are always aware UTC datetimes
and serialize as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from booking_engine.utils import ensure_utc, format_instant

TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"


class DayOfWeek(str, Enum):
    """Keys of ``Calendar.working_hours``."""

    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


class OwnerType(str, Enum):
    """Who a calendar, service or time-off belongs to."""

    ORGANIZATION = "organization"
    MEMBER = "member"


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CustomerFieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


class EntityModel(BaseModel):
    """Base for stored documents. ``id`` is assigned by the repository."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None


class WorkingHoursBlock(BaseModel):
    """One contiguous ``HH:MM``-``HH:MM`` window (UTC) within a weekday."""

    start: str = Field(pattern=TIME_OF_DAY_PATTERN)
    end: str = Field(pattern=TIME_OF_DAY_PATTERN)

    @model_validator(mode="after")
    def _start_before_end(self) -> "WorkingHoursBlock":
        # Zero-padded HH:MM strings order the same way as the times they encode.
        if self.start >= self.end:
            raise ValueError(f"working hours start {self.start} must be before end {self.end}")
        return self


class Calendar(EntityModel):
    owner_type: OwnerType
    owner_id: str
    name: str = ""
    working_hours: dict[DayOfWeek, list[WorkingHoursBlock]] = Field(default_factory=dict)
    buffer_time: int = Field(default=0, ge=0)
    time_zone: str = "UTC"

    def blocks_for(self, day: DayOfWeek) -> list[WorkingHoursBlock]:
        """Working-hours blocks for ``day``, empty when the day is closed."""
        return self.working_hours.get(day) or []


class Service(EntityModel):
    organization_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    price: float = Field(default=0, ge=0)
    duration: int = Field(gt=0)
    owner_id: str
    owner_type: OwnerType = OwnerType.MEMBER


class TimeOff(EntityModel):
    """An owner-level unavailability window ``[start_at, end_at)``."""

    owner_type: OwnerType = OwnerType.MEMBER
    owner_id: str
    start_at: datetime
    end_at: datetime
    reason: str = ""
    created_by: Optional[str] = None

    @field_validator("start_at", "end_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_serializer("start_at", "end_at", when_used="json")
    def _to_iso(self, value: datetime) -> str:
        return format_instant(value)


class Appointment(EntityModel):
    organization_id: Optional[str] = None
    calendar_id: str
    assignee_type: OwnerType
    assignee_id: str
    customer_id: str
    service_id: str
    title: str = ""
    description: str = ""
    start_time: datetime
    duration: int = Field(ge=0)
    fee: Optional[float] = None
    status: AppointmentStatus = AppointmentStatus.PENDING

    @field_validator("start_time")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_serializer("start_time", when_used="json")
    def _to_iso(self, value: datetime) -> str:
        return format_instant(value)

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration)

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED


class Customer(EntityModel):
    organization_id: str
    email: str
    name: str = ""
    phone: str = ""
    address: Optional[str] = None
    notes: Optional[str] = None
    timezone: Optional[str] = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)


class FieldValidationRules(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None


class CustomerFieldConfig(BaseModel):
    """An organization-defined extra field collected from customers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    type: CustomerFieldType
    is_required: bool = False
    placeholder: Optional[str] = None
    options: Optional[list[str]] = None
    validation: Optional[FieldValidationRules] = None


class OrganizationSettings(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timezone: str = "UTC"
    default_buffer_time: int = Field(default=0, ge=0)
    customer_fields: list[CustomerFieldConfig] = Field(default_factory=list)


class Organization(EntityModel):
    name: str
    currency: str = "EUR"
    settings: OrganizationSettings = Field(default_factory=OrganizationSettings)
