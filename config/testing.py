import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_management_test"),
}

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"
JWT_ISSUER = "hr-management-test"
JWT_AUDIENCE = "hr-management-test-clients"
ACCESS_TOKEN_MINUTES = 60
REFRESH_TOKEN_DAYS = 7

ANNUAL_LEAVE_DAYS = 25

DEFAULT_ADMIN_EMAIL = "admin@hr.local"
DEFAULT_ADMIN_PASSWORD = "Admin@123"

LOG_LEVEL = "WARNING"
LOG_JSON = False

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_BOOTSTRAP = bool(int(os.getenv("AUTO_BOOTSTRAP", "0")))
