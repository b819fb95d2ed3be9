import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_dashboard_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

LOGIN_TTL_HOURS = 24
STATS_REFRESH_SECONDS = 30
ACTIVITY_REFRESH_SECONDS = 60

AUTO_INIT_DB = False
AUTO_SEED_DB = False
