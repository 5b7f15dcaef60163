"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

STANDARD_WORKDAY_HOURS = 8

DEFAULT_ACCESS_TOKEN_MINUTES = 60
DEFAULT_REFRESH_TOKEN_DAYS = 7
REFRESH_TOKEN_BYTES = 64

EMPLOYEE_CODE_MAX_RETRIES = 10
EMPLOYEE_CODE_ALPHABET = "abcdefghijklmnopqrstuvwxyz1234567890ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Actor recorded on mutations when no authenticated user applies.
SERVICE_ACCOUNT = "system"

DEFAULT_REJECT_COMMENT = "Request rejected"

REASON_REPLACED = "Replaced by new token"
REASON_REVOKED_BY_USER = "Revoked by user"
REASON_LOGOUT = "User logged out"

MIN_PASSWORD_LENGTH = 6
