import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", "12345"),
    "database": os.getenv("DB_NAME", "workforce_test_db"),
    "connection_timeout": 2,
}

TIME_ZONE = "Asia/Manila"

ENABLE_SCHEDULER = False
REMINDER_INTERVAL_SECONDS = 60
REMINDER_WORKERS = 2
REMINDER_TICK_TIMEOUT_SECONDS = 5
REMINDER_MAX_INSTANCES = 1

ADMIN_TOKEN = "test-admin-token"

LOG_LEVEL = "DEBUG"
DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
