"""
In-memory repository adapter.

Stores documents as wire-shaped dicts keyed by organization and id, and
hands back validated pydantic entities. Every call yields to the event
loop once, so concurrent requests interleave the way they would against a
networked document store.
"""

import asyncio
import logging
import operator
import uuid
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, Type, Union

from pydantic import BaseModel

from booking_engine.errors import NotFoundError
from booking_engine.repositories.base import (
    BookingRepositories,
    EntityT,
    Operator,
    OrderBy,
    Pagination,
    QueryConstraint,
)
from booking_engine.schemas.entities import (
    Appointment,
    Calendar,
    Customer,
    Organization,
    Service,
    TimeOff,
)

logger = logging.getLogger(__name__)

_GLOBAL_SCOPE = "__global__"

_COMPARATORS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
    Operator.LT: operator.lt,
    Operator.LE: operator.le,
    Operator.GT: operator.gt,
    Operator.GE: operator.ge,
    Operator.IN: lambda left, right: left in right,
    Operator.NOT_IN: lambda left, right: left not in right,
}


def _matches(document: Mapping[str, Any], constraint: QueryConstraint) -> bool:
    if constraint.field not in document:
        return False
    left = document[constraint.field]
    if left is None and constraint.operator not in (Operator.EQ, Operator.NE):
        return False
    return _COMPARATORS[constraint.operator](left, constraint.value)


class InMemoryRepository(Generic[EntityT]):
    """Dict-backed implementation of ``Repository`` for one entity type."""

    def __init__(self, model: Type[EntityT]) -> None:
        self.model = model
        self._documents: dict[str, dict[str, dict[str, Any]]] = {}

    def _scope(self, organization_id: Optional[str]) -> dict[str, dict[str, Any]]:
        return self._documents.setdefault(organization_id or _GLOBAL_SCOPE, {})

    def _to_entity(self, doc_id: str, document: Mapping[str, Any]) -> EntityT:
        return self.model.model_validate({**document, "id": doc_id})

    async def get(self, id: str, *, organization_id: Optional[str] = None) -> Optional[EntityT]:
        await asyncio.sleep(0)
        document = self._scope(organization_id).get(id)
        if document is None:
            return None
        return self._to_entity(id, document)

    async def get_all(
        self,
        query_constraints: Sequence[QueryConstraint] = (),
        pagination: Optional[Pagination] = None,
        order_by: Optional[OrderBy] = None,
        *,
        organization_id: Optional[str] = None,
    ) -> list[EntityT]:
        await asyncio.sleep(0)
        rows = [
            (doc_id, document)
            for doc_id, document in self._scope(organization_id).items()
            if all(_matches(document, c) for c in query_constraints)
        ]

        if order_by is not None:
            def sort_key(row: tuple[str, dict[str, Any]]) -> tuple[bool, Any]:
                value = row[1].get(order_by.field)
                # missing values sort last and never compare against each other
                return (value is None, "" if value is None else value)

            rows.sort(
                key=sort_key,
                reverse=order_by.direction.lower() == "desc",
            )

        if pagination is not None:
            end = None if pagination.limit is None else pagination.offset + pagination.limit
            rows = rows[pagination.offset:end]

        return [self._to_entity(doc_id, document) for doc_id, document in rows]

    async def create(
        self,
        data: Union[EntityT, Mapping[str, Any]],
        *,
        organization_id: Optional[str] = None,
    ) -> str:
        await asyncio.sleep(0)
        entity = data if isinstance(data, BaseModel) else self.model.model_validate(data)
        document = entity.model_dump(by_alias=True, exclude={"id"})
        doc_id = uuid.uuid4().hex
        self._scope(organization_id)[doc_id] = document
        logger.debug("Created %s with ID: %s", self.model.__name__, doc_id)
        return doc_id

    async def update(
        self,
        id: str,
        partial: Mapping[str, Any],
        *,
        organization_id: Optional[str] = None,
    ) -> None:
        await asyncio.sleep(0)
        scope = self._scope(organization_id)
        if id not in scope:
            raise NotFoundError(self.model.__name__.lower(), id)
        merged = self._to_entity(id, {**scope[id], **partial})
        scope[id] = merged.model_dump(by_alias=True, exclude={"id"})
        logger.debug("Updated %s %s: %s", self.model.__name__, id, sorted(partial))

    def insert(self, document: Mapping[str, Any], *, organization_id: Optional[str] = None) -> str:
        """Synchronously store a document, keeping its ``id`` when present. Used for seeding."""
        entity = self.model.model_validate(document)
        doc_id = entity.id or uuid.uuid4().hex
        self._scope(organization_id)[doc_id] = entity.model_dump(by_alias=True, exclude={"id"})
        return doc_id

    def count(self, *, organization_id: Optional[str] = None) -> int:
        return len(self._scope(organization_id))


def in_memory_repositories() -> BookingRepositories:
    """Build a fresh, empty set of in-memory repositories."""
    return BookingRepositories(
        organizations=InMemoryRepository(Organization),
        services=InMemoryRepository(Service),
        calendars=InMemoryRepository(Calendar),
        time_offs=InMemoryRepository(TimeOff),
        appointments=InMemoryRepository(Appointment),
        customers=InMemoryRepository(Customer),
    )
