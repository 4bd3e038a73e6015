"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_WORK_START = time(9, 0)
DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_PAGE_SIZE = 10

MIN_LEAVE_REASON_LENGTH = 10

# Days per leave type granted each calendar year.
DEFAULT_LEAVE_ALLOCATIONS = {
    "annual": 21,
    "sick": 10,
    "personal": 5,
}

REGULAR_HOURS_PER_DAY = 8
# 40 hrs/week * 52 weeks
STANDARD_HOURS_PER_YEAR = 2080
OVERTIME_MULTIPLIER = 1.5

TAX_RATE = 0.22
INSURANCE_RATE = 0.05
RETIREMENT_RATE = 0.06
