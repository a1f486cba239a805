"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Sanitized field lengths (characters kept after trimming)
MAX_NAME_LENGTH = 200
MAX_PHONE_LENGTH = 50
MAX_EMAIL_LENGTH = 254
MAX_NOTES_LENGTH = 1000
MAX_LABEL_LENGTH = 120
MAX_DOMAIN_LENGTH = 255
MAX_STATUS_LENGTH = 20

# Booking limits
MIN_GUESTS = 1
MAX_GUESTS = 50

# Time arithmetic
MINUTES_PER_DAY = 24 * 60
MINUTES_PER_HOUR = 60

# Payload formats
UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}(:\d{2})?$"

# Hosts trusted as origins outside production
DEV_HOSTS = frozenset({"localhost", "127.0.0.1", "0.0.0.0"})

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
