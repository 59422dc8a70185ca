import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    ENVIRONMENT = data.get("ENVIRONMENT", "development")
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./authority.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    BASE_URL = data.get("BASE_URL", "http://localhost:3000")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_REFRESH_SECRET = data.get("JWT_REFRESH_SECRET", "dev-refresh-secret-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_MINUTES = int(data.get("ACCESS_TOKEN_MINUTES", 15))
    REFRESH_TOKEN_DAYS = int(data.get("REFRESH_TOKEN_DAYS", 7))
    TWO_FACTOR_TOKEN_MINUTES = int(data.get("TWO_FACTOR_TOKEN_MINUTES", 5))
    PASSWORD_RESET_TOKEN_MINUTES = int(data.get("PASSWORD_RESET_TOKEN_MINUTES", 10))
    EMAIL_VERIFICATION_TOKEN_HOURS = int(data.get("EMAIL_VERIFICATION_TOKEN_HOURS", 24))

    # Passwords and lockout
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))
    MAX_FAILED_LOGIN_ATTEMPTS = int(data.get("MAX_FAILED_LOGIN_ATTEMPTS", 5))
    LOCKOUT_MINUTES = int(data.get("LOCKOUT_MINUTES", 30))
    PASSWORD_HASH_TIMEOUT_SECONDS = float(data.get("PASSWORD_HASH_TIMEOUT_SECONDS", 5.0))
    REQUEST_TIMEOUT_SECONDS = float(data.get("REQUEST_TIMEOUT_SECONDS", 30.0))

    # Second factor
    TOTP_ISSUER = data.get("TOTP_ISSUER", "Identity Authority")
    TOTP_VALID_WINDOW = int(data.get("TOTP_VALID_WINDOW", 2))
    BACKUP_CODE_COUNT = int(data.get("BACKUP_CODE_COUNT", 10))

    # Rate limiting
    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    AUTH_RATE_LIMIT = int(data.get("AUTH_RATE_LIMIT", 20))
    AUTH_RATE_WINDOW_SECONDS = int(data.get("AUTH_RATE_WINDOW_SECONDS", 900))
    ACCOUNT_RATE_LIMIT = int(data.get("ACCOUNT_RATE_LIMIT", 100))
    ACCOUNT_RATE_WINDOW_SECONDS = int(data.get("ACCOUNT_RATE_WINDOW_SECONDS", 900))
    CACHE_BACKEND = data.get("CACHE_BACKEND", "memory")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")

    # Mail
    SMTP_HOST = data.get("SMTP_HOST", "")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USER = data.get("SMTP_USER", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    EMAIL_FROM = data.get("EMAIL_FROM", "noreply@localhost")
    EMAIL_FROM_NAME = data.get("EMAIL_FROM_NAME", "Identity Authority")
