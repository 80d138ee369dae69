"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Flat daily-rate divisor for leave deductions, independent of month length.
SALARY_DIVISOR_DAYS = 30
FEE_DUE_DAY = 10
DEFAULT_SESSION_START_MONTH = 4
MONTHS_PER_SESSION = 12
HALF_DAY_WEIGHT = "0.5"
DEFAULT_LIST_LIMIT = 200

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
