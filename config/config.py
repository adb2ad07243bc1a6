"""Settings shared by every environment module.

Each value can be overridden through the environment (or a .env file, which
create_app() loads with python-dotenv before importing settings).
"""

import os


def env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def db_config(default_database: str = "attendease_db") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": env_int("DB_PORT", 3306),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_database),
    }


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# "date": rows carry a calendar date and the weekday is derived from it.
# "day": rows carry only a weekday name.
SCHEDULE_MODE = os.getenv("SCHEDULE_MODE", "date").lower()

# "selected_approver": one request per submission, sent to the picked approver.
# "per_faculty": one request per faculty teaching the selected classes.
REQUEST_ROUTING = os.getenv("REQUEST_ROUTING", "selected_approver").lower()

ALLOW_SELF_SIGNUP = env_bool("ALLOW_SELF_SIGNUP", False)
RESET_TOKEN_TTL_MINUTES = env_int("RESET_TOKEN_TTL_MINUTES", 60)
MAX_UPLOAD_BYTES = env_int("MAX_UPLOAD_BYTES", 2 * 1024 * 1024)
