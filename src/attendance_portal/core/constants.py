"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SESSION_STORAGE_KEY = "authUser"
REMEMBERED_ID_COOKIE = "rememberedEmployeeId"

LOGIN_MAX_ATTEMPTS = 5
LOGIN_LOCKOUT_SECONDS = 30

EMPLOYEE_ID_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 6

RESET_TOKEN_TTL_MINUTES = 60
DEFAULT_HISTORY_LIMIT = 200
