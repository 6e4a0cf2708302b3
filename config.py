import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    DB_POOL_TIMEOUT_SECONDS = int(data.get("DB_POOL_TIMEOUT_SECONDS", 5))
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Exchange token store backend: "memory" (single instance) or "redis"
    CACHE_BACKEND = data.get("CACHE_BACKEND", "memory")
    EXCHANGE_TOKEN_TTL_MINUTES = int(data.get("EXCHANGE_TOKEN_TTL_MINUTES", 5))
    EXCHANGE_TOKEN_SWEEP_SECONDS = int(data.get("EXCHANGE_TOKEN_SWEEP_SECONDS", 60))

    OTP_TTL_MINUTES = int(data.get("OTP_TTL_MINUTES", 10))
    # Development only: echoes the generated code in the issue-otp response
    OTP_DEBUG_ECHO = bool(data.get("OTP_DEBUG_ECHO", False))

    RATE_LIMIT_MAX_ATTEMPTS = int(data.get("RATE_LIMIT_MAX_ATTEMPTS", 5))
    RATE_LIMIT_LOCKOUT_MINUTES = int(data.get("RATE_LIMIT_LOCKOUT_MINUTES", 60))

    # Google Workspace directory (service account with domain-wide delegation)
    DIRECTORY_TIMEOUT_SECONDS = float(data.get("DIRECTORY_TIMEOUT_SECONDS", 30))
    GOOGLE_SERVICE_ACCOUNT_EMAIL = data.get("GOOGLE_SERVICE_ACCOUNT_EMAIL", "")
    GOOGLE_PRIVATE_KEY = data.get("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n")
    GOOGLE_ADMIN_EMAIL = data.get("GOOGLE_ADMIN_EMAIL", "")
