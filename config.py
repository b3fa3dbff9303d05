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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./accounts.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    DB_CREATE_TABLES = bool(data.get("DB_CREATE_TABLES", True))

    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_MINUTES = int(data.get("ACCESS_TOKEN_TTL_MINUTES", 15))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 30))

    PASSWORD_RESET_TTL_MINUTES = int(data.get("PASSWORD_RESET_TTL_MINUTES", 60))
    EMAIL_VERIFICATION_TTL_MINUTES = int(data.get("EMAIL_VERIFICATION_TTL_MINUTES", 30))
    EMAIL_CHANGE_TTL_MINUTES = int(data.get("EMAIL_CHANGE_TTL_MINUTES", 60))
    TWO_FACTOR_CODE_TTL_MINUTES = int(data.get("TWO_FACTOR_CODE_TTL_MINUTES", 10))
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    COOKIE_SECURE = bool(data.get("COOKIE_SECURE", True))
    COOKIE_SAMESITE = data.get("COOKIE_SAMESITE", "strict")
    COOKIE_DOMAIN = data.get("COOKIE_DOMAIN", None)

    FRONTEND_URL = data.get("FRONTEND_URL", "http://localhost:3000")
    EMAIL_BACKEND = data.get("EMAIL_BACKEND", "log")
    EMAIL_API_URL = data.get("EMAIL_API_URL", "")
    EMAIL_API_KEY = data.get("EMAIL_API_KEY", "")
    EMAIL_FROM = data.get("EMAIL_FROM", "no-reply@example.com")
    EMAIL_TIMEOUT_SECONDS = float(data.get("EMAIL_TIMEOUT_SECONDS", 10.0))

    REALTIME_QUEUE_SIZE = int(data.get("REALTIME_QUEUE_SIZE", 1000))
    RECONNECT_MAX_ATTEMPTS = int(data.get("RECONNECT_MAX_ATTEMPTS", 5))
    RECONNECT_BASE_DELAY = float(data.get("RECONNECT_BASE_DELAY", 1.0))
    RECONNECT_MAX_DELAY = float(data.get("RECONNECT_MAX_DELAY", 30.0))
    RECONNECT_COOLDOWN = float(data.get("RECONNECT_COOLDOWN", 30.0))

    CLEANUP_INTERVAL_MINUTES = float(data.get("CLEANUP_INTERVAL_MINUTES", 5))
    TOKEN_RETENTION_HOURS = int(data.get("TOKEN_RETENTION_HOURS", 24))
