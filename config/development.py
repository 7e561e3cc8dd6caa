import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "mess_db"),
}

# Meal windows, local time in MESS_TIMEZONE (HH:MM, end inclusive)
BREAKFAST_START = os.getenv("BREAKFAST_START", "07:00")
BREAKFAST_END = os.getenv("BREAKFAST_END", "10:00")
LUNCH_START = os.getenv("LUNCH_START", "12:00")
LUNCH_END = os.getenv("LUNCH_END", "15:00")
DINNER_START = os.getenv("DINNER_START", "19:00")
DINNER_END = os.getenv("DINNER_END", "22:00")
MESS_TIMEZONE = os.getenv("MESS_TIMEZONE", "Asia/Kolkata")

MESS_ID = os.getenv("MESS_ID", "main")
MESS_NAME = os.getenv("MESS_NAME", "Main Mess")
MESS_LATITUDE = os.getenv("MESS_LATITUDE", "28.7041")
MESS_LONGITUDE = os.getenv("MESS_LONGITUDE", "77.1025")
GEOFENCE_RADIUS = os.getenv("GEOFENCE_RADIUS", "200")
REQUIRE_GEOLOCATION = os.getenv("REQUIRE_GEOLOCATION", "0")

# QR_SECRET enables signed mess codes; QR_EXPECTED_CODE is a static fallback
QR_SECRET = os.getenv("QR_SECRET", "dev-qr-secret")
QR_EXPECTED_CODE = os.getenv("QR_EXPECTED_CODE", "")
QR_MAX_AGE_SECONDS = os.getenv("QR_MAX_AGE_SECONDS", "0")
QR_VERIFY_TIMEOUT = os.getenv("QR_VERIFY_TIMEOUT", "5")
REQUIRE_QR_STRATEGY = os.getenv("REQUIRE_QR_STRATEGY", "0")

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
