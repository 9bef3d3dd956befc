"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"
DEFAULT_TOKEN_HOURS = 12
DEFAULT_REQUEST_LIST_LIMIT = 200

MIN_LEAVE_DAYS = 0.5
MAX_LEAVE_DAYS = 30
MONTHLY_LEAVE_ACCRUAL = 1.0
