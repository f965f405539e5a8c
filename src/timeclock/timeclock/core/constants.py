"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Index matches datetime.weekday() (Monday == 0).
WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

DEFAULT_TIMEZONE = "America/Chicago"
DEFAULT_EARLY_CLOCK_IN_MINUTES = 0
DEFAULT_MAX_PUNCH_HOURS = 24

DAY_KEY_FORMAT = "%Y-%m-%d"
FEET_PER_KILOMETER = 3280.84
EARTH_RADIUS_KM = 6371.0
