import os

from .config import (  # noqa: F401
    ALLOW_SELF_SIGNUP,
    LOG_LEVEL,
    MAX_UPLOAD_BYTES,
    REQUEST_ROUTING,
    RESET_TOKEN_TTL_MINUTES,
    SCHEDULE_MODE,
    db_config,
    env_bool,
)

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config()

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_bool("AUTO_INIT_DB", True)
# Optional: also seed demo data on startup
AUTO_SEED_DB = env_bool("AUTO_SEED_DB", False)
