import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "care_roster_test"),
}

STORAGE = os.getenv("STORAGE", "memory")

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
# Optional: also load the demo company and workers (database/seed.sql)
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

OVERTIME_SPLIT = os.getenv("OVERTIME_SPLIT", "period")
PAYROLL_LOCK_FINALIZED = bool(int(os.getenv("PAYROLL_LOCK_FINALIZED", "0")))
