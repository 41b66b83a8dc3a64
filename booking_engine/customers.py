"""
Customer record construction with organization-defined custom fields.

Organizations declare extra customer fields (``settings.customer_fields``);
values supplied at booking time are checked against those declarations
before a new customer is stored. Unknown field ids are dropped.
"""

import logging
import re
from datetime import datetime
from typing import Any, Mapping, Optional

from booking_engine.errors import ValidationError
from booking_engine.schemas.entities import (
    Customer,
    CustomerFieldConfig,
    CustomerFieldType,
    Organization,
)
from booking_engine.utils import normalize_phone, parse_instant

logger = logging.getLogger(__name__)

_TEXT_TYPES = frozenset({CustomerFieldType.TEXT, CustomerFieldType.EMAIL, CustomerFieldType.PHONE})


def _field_error(config: CustomerFieldConfig, message: str) -> ValidationError:
    return ValidationError(
        f"Field '{config.name}' {message}",
        errors=[{"field": config.id, "message": message}],
    )


def validate_custom_field_value(value: Any, config: CustomerFieldConfig) -> Any:
    """Check and coerce one custom field value according to its configuration."""
    if value is None:
        if config.is_required:
            raise _field_error(config, "is required")
        return None

    if config.type in _TEXT_TYPES:
        if not isinstance(value, str):
            raise _field_error(config, "must be a string")
        rules = config.validation
        if rules is not None:
            if rules.min_length and len(value) < rules.min_length:
                raise _field_error(config, f"must be at least {rules.min_length} characters")
            if rules.max_length and len(value) > rules.max_length:
                raise _field_error(config, f"must be at most {rules.max_length} characters")
            if rules.pattern and not re.search(rules.pattern, value):
                raise _field_error(config, "does not match required pattern")
        return value

    if config.type == CustomerFieldType.NUMBER:
        if isinstance(value, bool):
            raise _field_error(config, "must be a valid number")
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                raise _field_error(config, "must be a valid number") from None
        if isinstance(value, (int, float)):
            return value
        raise _field_error(config, "must be a valid number")

    if config.type == CustomerFieldType.BOOLEAN:
        if isinstance(value, str):
            return value.strip().lower() == "true"
        if not isinstance(value, bool):
            raise _field_error(config, "must be a boolean")
        return value

    if config.type == CustomerFieldType.DATE:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return parse_instant(value)
            except ValueError:
                raise _field_error(config, "must be a valid date") from None
        raise _field_error(config, "must be a valid date")

    if config.type == CustomerFieldType.SELECT:
        if not isinstance(value, str):
            raise _field_error(config, "must be a string")
        if config.options and value not in config.options:
            raise _field_error(config, f"must be one of: {', '.join(config.options)}")
        return value

    raise _field_error(config, "has an unknown field type")


def build_customer_payload(
    organization: Organization,
    *,
    email: str,
    name: str,
    phone: str,
    address: Optional[str] = None,
    notes: Optional[str] = None,
    timezone: Optional[str] = None,
    custom_fields: Optional[Mapping[str, Any]] = None,
) -> Customer:
    """Assemble a new customer for ``organization`` with validated custom fields.

    Raises:
        ValidationError: If a custom value is invalid or a required field is missing.
    """
    supplied = dict(custom_fields or {})
    configs = {config.id: config for config in organization.settings.customer_fields}

    validated: dict[str, Any] = {}
    for field_id, value in supplied.items():
        config = configs.get(field_id)
        if config is None:
            logger.debug("Ignoring unknown customer field '%s'", field_id)
            continue
        validated[field_id] = validate_custom_field_value(value, config)

    for config in configs.values():
        if config.is_required and config.id not in supplied:
            raise ValidationError(
                f"Required field '{config.name}' is missing",
                errors=[{"field": config.id, "message": "is required"}],
            )

    return Customer(
        organization_id=organization.id or "",
        email=email,
        name=name,
        phone=normalize_phone(phone),
        address=address,
        notes=notes,
        timezone=timezone,
        custom_fields=validated,
    )
