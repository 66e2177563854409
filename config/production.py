import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workforce_db"),
    "connection_timeout": int(os.getenv("DB_TIMEOUT", "5")),
}

TIME_ZONE = os.getenv("TIME_ZONE", "Asia/Manila")

ENABLE_SCHEDULER = bool(int(os.getenv("ENABLE_SCHEDULER", "1")))
REMINDER_INTERVAL_SECONDS = int(os.getenv("REMINDER_INTERVAL_SECONDS", "60"))
REMINDER_WORKERS = int(os.getenv("REMINDER_WORKERS", "8"))
REMINDER_TICK_TIMEOUT_SECONDS = float(os.getenv("REMINDER_TICK_TIMEOUT_SECONDS", "30"))
REMINDER_MAX_INSTANCES = int(os.getenv("REMINDER_MAX_INSTANCES", "2"))

# Empty token = admin endpoints always answer 401
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
