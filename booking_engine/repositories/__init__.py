from booking_engine.repositories.base import (
    BookingRepositories,
    Operator,
    OrderBy,
    Pagination,
    QueryConstraint,
    Repository,
)
from booking_engine.repositories.memory import InMemoryRepository, in_memory_repositories

__all__ = [
    "BookingRepositories",
    "InMemoryRepository",
    "Operator",
    "OrderBy",
    "Pagination",
    "QueryConstraint",
    "Repository",
    "in_memory_repositories",
]
