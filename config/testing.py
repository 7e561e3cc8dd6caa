import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "mess_db_test"),
}

MESS_TIMEZONE = "Asia/Kolkata"
MESS_ID = "test-mess"
MESS_NAME = "Test Mess"
MESS_LATITUDE = "28.7041"
MESS_LONGITUDE = "77.1025"
GEOFENCE_RADIUS = "200"

QR_SECRET = ""
QR_EXPECTED_CODE = "ABC123"
QR_VERIFY_TIMEOUT = "1"

DEBUG = False
TESTING = True

LOG_LEVEL = "DEBUG"
LOG_FILE = ""

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
