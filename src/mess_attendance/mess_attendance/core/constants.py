"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MEAL_WINDOWS = {
    "breakfast": ("07:00", "10:00"),
    "lunch": ("12:00", "15:00"),
    "dinner": ("19:00", "22:00"),
}
DEFAULT_TIMEZONE = "Asia/Kolkata"

DEFAULT_MESS_LATITUDE = 28.7041
DEFAULT_MESS_LONGITUDE = 77.1025
DEFAULT_GEOFENCE_RADIUS_METERS = 200

DEFAULT_QR_VERIFY_TIMEOUT_SECONDS = 5.0
MESS_QR_TYPE = "MESS_QR"

DEFAULT_HISTORY_LIMIT = 30

EARTH_RADIUS_METERS = 6371000

# User-facing failure reasons
ERR_INVALID_MEAL_TYPE = "Invalid meal type"
ERR_INVALID_QR = "Invalid or expired QR code"
ERR_DUPLICATE_SCAN = "Attendance already marked for this meal"
ERR_GEOLOCATION_REQUIRED = "Geolocation is required for attendance"
ERR_TRY_AGAIN = "Could not verify attendance right now, please try again"
