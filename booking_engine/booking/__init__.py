from booking_engine.booking.orchestrator import book_appointment, cancel_appointment
from booking_engine.booking.validation import validate_booking_request

__all__ = ["book_appointment", "cancel_appointment", "validate_booking_request"]
