import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_operations"),
}

# Employee directory (employee service)
EMPLOYEE_SERVICE_URL = os.getenv("EMPLOYEE_SERVICE_URL", "http://localhost:3001")
EMPLOYEE_SERVICE_TIMEOUT = float(os.getenv("EMPLOYEE_SERVICE_TIMEOUT", "5"))
EMPLOYEE_SERVICE_TOKEN = os.getenv("EMPLOYEE_SERVICE_TOKEN")

# Attendance rules
WORK_START_TIME = os.getenv("WORK_START_TIME", "09:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "0"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
