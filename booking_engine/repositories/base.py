"""
Generic document-repository interface consumed by the booking engine.

The engine never talks to a database directly: every entity collection is
reached through an object implementing ``Repository``. Calls are async;
each one is a suspension point and no lock is held across it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Sequence, TypeVar, Union

from pydantic import BaseModel

from booking_engine.schemas.entities import (
    Appointment,
    Calendar,
    Customer,
    Organization,
    Service,
    TimeOff,
)

EntityT = TypeVar("EntityT", bound=BaseModel)


class Operator(str, Enum):
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    IN = "in"
    NOT_IN = "not-in"


@dataclass(frozen=True)
class QueryConstraint:
    """A single ``field <operator> value`` filter on wire (camelCase) field names."""

    field: str
    operator: Operator
    value: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", Operator(self.operator))


@dataclass(frozen=True)
class Pagination:
    limit: Optional[int] = None
    offset: int = 0


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = "asc"


class Repository(Protocol[EntityT]):
    """Operations every entity collection supports."""

    async def get(self, id: str, *, organization_id: Optional[str] = None) -> Optional[EntityT]:
        ...

    async def get_all(
        self,
        query_constraints: Sequence[QueryConstraint] = (),
        pagination: Optional[Pagination] = None,
        order_by: Optional[OrderBy] = None,
        *,
        organization_id: Optional[str] = None,
    ) -> list[EntityT]:
        ...

    async def create(
        self,
        data: Union[EntityT, Mapping[str, Any]],
        *,
        organization_id: Optional[str] = None,
    ) -> str:
        ...

    async def update(
        self,
        id: str,
        partial: Mapping[str, Any],
        *,
        organization_id: Optional[str] = None,
    ) -> None:
        ...


@dataclass
class BookingRepositories:
    """The entity collections a booking or slot query reads and writes."""

    organizations: Repository[Organization]
    services: Repository[Service]
    calendars: Repository[Calendar]
    time_offs: Repository[TimeOff]
    appointments: Repository[Appointment]
    customers: Repository[Customer]
