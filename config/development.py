import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "care_roster"),
}

# "mysql" or "memory"
STORAGE = os.getenv("STORAGE", "mysql")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also load the demo company and workers (database/seed.sql)
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# "period" applies the weekly threshold to the whole payroll period, "weekly" per ISO week
OVERTIME_SPLIT = os.getenv("OVERTIME_SPLIT", "period")
PAYROLL_LOCK_FINALIZED = bool(int(os.getenv("PAYROLL_LOCK_FINALIZED", "0")))
