import os

SECRET_KEY = "test-secret-key-for-the-attendance-tracker"
JWT_SECRET_KEY = "test-jwt-secret-key-for-the-attendance-tracker"
JWT_ACCESS_TOKEN_HOURS = 1

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_tracker_test"),
}

TIMEZONE = "Asia/Ho_Chi_Minh"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
