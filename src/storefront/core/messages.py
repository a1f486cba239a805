"""User-facing messages returned by the public intake API.

Clients only ever see strings from this table; storage and provider
errors are logged server-side and replaced by the generic entries.
"""

INVALID_PAYLOAD = "Invalid request data"
MISSING_FIELDS = "Missing required fields"
INVALID_DATE_TIME = "Invalid date or time"
DATE_TIME_IN_PAST = "The requested date and time is in the past"
EMPTY_ORDER = "The order is empty"
TOO_MANY_ITEMS = "Too many items in the order"
ITEMS_UNAVAILABLE = "Some items are not available"
SERVICES_UNAVAILABLE = "Some services are not available"
PROFESSIONAL_UNAVAILABLE = "The selected professional is not available"
INVALID_TOTAL = "Invalid order total"
SLOT_UNAVAILABLE = "The requested time slot is not available"
PICKUP_TOO_SOON = "The pickup time is too soon"
CANCEL_COMPLETED = "A completed booking cannot be cancelled"
CANCEL_TOO_LATE = "The booking can no longer be cancelled"

UNAUTHORIZED = "Unauthorized"
FORBIDDEN = "Forbidden"
ORIGIN_NOT_ALLOWED = "Origin not allowed"
TENANT_NOT_FOUND = "Website not found"
BOOKING_NOT_FOUND = "Booking not found"
RATE_LIMITED = "Too many requests"
STORAGE_FAILURE = "The request could not be saved"
PAYMENT_FAILURE = "The payment could not be started"
INTERNAL_ERROR = "Internal server error"

RESERVATION_CREATED = "Reservation created"
APPOINTMENT_CREATED = "Appointment created"
