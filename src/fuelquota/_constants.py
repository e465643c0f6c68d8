"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8080/api"
USER_AGENT = "fuelquota-python/1"

QR_PREFIX = "FUELQUOTA"
QR_SEPARATOR = ":"
QR_MIN_FIELDS = 3

DISTRIBUTION_REFERENCE_PREFIX = "DIST"

#: Default quota cycle length in days (weekly quotas).
DEFAULT_QUOTA_PERIOD_DAYS = 7

#: Upper bound for a single dispense, in liters.
DEFAULT_MAX_DISPENSE_LITERS = 1000.0
