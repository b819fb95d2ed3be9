import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_dashboard"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Login (session or bearer token) stays valid this long
LOGIN_TTL_HOURS = int(os.getenv("LOGIN_TTL_HOURS", "24"))

# Polling intervals handed to dashboard clients
STATS_REFRESH_SECONDS = int(os.getenv("STATS_REFRESH_SECONDS", "30"))
ACTIVITY_REFRESH_SECONDS = int(os.getenv("ACTIVITY_REFRESH_SECONDS", "60"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed a demo owner and members on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
