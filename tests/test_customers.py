"""Tests for customer construction and custom field validation."""

from datetime import datetime

import pytest

from booking_engine.customers import build_customer_payload, validate_custom_field_value
from booking_engine.errors import ValidationError
from booking_engine.schemas.entities import CustomerFieldConfig, Organization

from tests.conftest import ORG_ID


def _field(**kwargs) -> CustomerFieldConfig:
    defaults = {"id": "f1", "name": "Field", "type": "text"}
    defaults.update(kwargs)
    return CustomerFieldConfig.model_validate(defaults)


def _organization(*fields: CustomerFieldConfig) -> Organization:
    return Organization(
        id=ORG_ID,
        name="Test Clinic",
        settings={"customerFields": [f.model_dump(by_alias=True) for f in fields]},
    )


class TestValidateCustomFieldValue:
    def test_text_length_rules(self):
        config = _field(validation={"minLength": 2, "maxLength": 4})
        assert validate_custom_field_value("abc", config) == "abc"
        with pytest.raises(ValidationError, match="at least 2"):
            validate_custom_field_value("a", config)
        with pytest.raises(ValidationError, match="at most 4"):
            validate_custom_field_value("abcde", config)

    def test_text_pattern(self):
        config = _field(name="Member number", validation={"pattern": r"^M\d{4}$"})
        assert validate_custom_field_value("M1234", config) == "M1234"
        with pytest.raises(ValidationError, match="Field 'Member number' does not match"):
            validate_custom_field_value("1234", config)

    def test_number_accepts_numeric_strings(self):
        config = _field(type="number")
        assert validate_custom_field_value("42", config) == 42.0
        assert validate_custom_field_value(7, config) == 7

    def test_number_rejects_garbage_and_booleans(self):
        config = _field(type="number")
        with pytest.raises(ValidationError):
            validate_custom_field_value("forty", config)
        with pytest.raises(ValidationError):
            validate_custom_field_value(True, config)

    def test_boolean_strings(self):
        config = _field(type="boolean")
        assert validate_custom_field_value("true", config) is True
        assert validate_custom_field_value("no", config) is False
        assert validate_custom_field_value(False, config) is False

    def test_date(self):
        config = _field(type="date")
        assert isinstance(validate_custom_field_value("2025-03-17", config), datetime)
        with pytest.raises(ValidationError, match="valid date"):
            validate_custom_field_value("soon", config)

    def test_select_options(self):
        config = _field(type="select", options=["none", "sanitas"])
        assert validate_custom_field_value("sanitas", config) == "sanitas"
        with pytest.raises(ValidationError, match="must be one of"):
            validate_custom_field_value("other", config)

    def test_required_none_rejected(self):
        with pytest.raises(ValidationError, match="is required"):
            validate_custom_field_value(None, _field(is_required=True))


class TestBuildCustomerPayload:
    def test_basic_customer(self):
        customer = build_customer_payload(
            _organization(), email="jo@example.com", name="Jo", phone="+34 (600) 111-222",
        )
        assert customer.organization_id == ORG_ID
        assert customer.phone == "+34600111222"
        assert customer.custom_fields == {}
        assert customer.id is None

    def test_unknown_fields_are_dropped(self):
        customer = build_customer_payload(
            _organization(_field(id="insurance", type="select", options=["none"])),
            email="jo@example.com", name="Jo", phone="600",
            custom_fields={"insurance": "none", "shoe_size": 44},
        )
        assert customer.custom_fields == {"insurance": "none"}

    def test_missing_required_field(self):
        organization = _organization(_field(id="dob", name="Date of birth", type="date", is_required=True))
        with pytest.raises(ValidationError, match="Required field 'Date of birth' is missing"):
            build_customer_payload(organization, email="jo@example.com", name="Jo", phone="600")

    def test_invalid_value_reports_field(self):
        organization = _organization(_field(id="age", name="Age", type="number"))
        with pytest.raises(ValidationError) as exc_info:
            build_customer_payload(
                organization, email="jo@example.com", name="Jo", phone="600",
                custom_fields={"age": "old"},
            )
        assert exc_info.value.errors == [{"field": "age", "message": "must be a valid number"}]
