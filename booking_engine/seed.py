"""
Load organization fixtures from JSON into in-memory repositories.

Seed file layout (wire field names)::

    {
      "organizations": [
        {
          "id": "org-1", "name": "...", "settings": {...},
          "services": [...], "calendars": [...], "timeOffs": [...],
          "appointments": [...], "customers": [...]
        }
      ]
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from booking_engine.repositories.base import BookingRepositories
from booking_engine.repositories.memory import InMemoryRepository, in_memory_repositories

logger = logging.getLogger(__name__)

_COLLECTIONS = (
    ("services", "services"),
    ("calendars", "calendars"),
    ("timeOffs", "time_offs"),
    ("appointments", "appointments"),
    ("customers", "customers"),
)


def seed_repositories(data: Mapping[str, Any]) -> BookingRepositories:
    """Build in-memory repositories populated from a parsed seed document."""
    repositories = in_memory_repositories()

    for org in data.get("organizations", []):
        org_doc = {k: v for k, v in org.items() if k not in dict(_COLLECTIONS)}
        org_id = _insert(repositories.organizations, org_doc)

        for key, attr in _COLLECTIONS:
            repo = getattr(repositories, attr)
            for document in org.get(key, []):
                if key in ("services", "customers"):
                    document = {"organizationId": org_id, **document}
                _insert(repo, document, organization_id=org_id)

        logger.debug("Seeded organization %s", org_id)

    return repositories


def _insert(repo: Any, document: Mapping[str, Any], **kwargs: Any) -> str:
    if not isinstance(repo, InMemoryRepository):
        raise TypeError(f"Seeding requires in-memory repositories, got {type(repo).__name__}")
    return repo.insert(document, **kwargs)


def load_seed_file(path: Path) -> BookingRepositories:
    """Load a seed JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    repositories = seed_repositories(data)
    logger.info(
        "Loaded %d organization(s) from %s",
        len(data.get("organizations", [])), path,
    )
    return repositories
