import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


def _get(name, default=None):
    # Process environment wins over env.yaml
    if name in os.environ:
        return os.environ[name]
    return data.get(name, default)


def _get_bool(name, default):
    value = _get(name, default)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _get_positive_int(name, default):
    value = _get(name)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _get_list(name, default):
    value = _get(name, default)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value or [])


class ApplicationConfig:
    DB_URI = _get("DB_URI", "sqlite+aiosqlite:///./family_auth.db")
    REDIS_URL = _get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_BACKEND = _get("CACHE_BACKEND", "memory")
    API_PREFIX = _get("API_PREFIX", "/api")
    API_PORT = _get_positive_int("API_PORT", 8000)
    API_HOST = _get("API_HOST", "0.0.0.0")
    ENVIRONMENT = _get("ENVIRONMENT", "dev")
    CORS_ORIGINS = _get_list("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = _get_bool("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = _get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = _get_bool("ENABLE_LOGGING_MIDDLEWARE", True)

    # Device activation / mobile device sessions
    DEVICE_ACCESS_KEY = _get("DEVICE_ACCESS_KEY", "")
    MOBILE_DEVICE_SESSION_SECRET = _get("MOBILE_DEVICE_SESSION_SECRET", "")
    MOBILE_DEVICE_SESSION_TTL_SECONDS = _get_positive_int(
        "MOBILE_DEVICE_SESSION_TTL_SECONDS", 60 * 60 * 24 * 30
    )

    # Parent elevation rate limiting
    PARENT_ELEVATION_RATE_LIMIT_WINDOW_MS = _get_positive_int(
        "PARENT_ELEVATION_RATE_LIMIT_WINDOW_MS", 10 * 60 * 1000
    )
    PARENT_ELEVATION_RATE_LIMIT_BASE_BACKOFF_MS = _get_positive_int(
        "PARENT_ELEVATION_RATE_LIMIT_BASE_BACKOFF_MS", 1000
    )
    PARENT_ELEVATION_RATE_LIMIT_MAX_BACKOFF_MS = _get_positive_int(
        "PARENT_ELEVATION_RATE_LIMIT_MAX_BACKOFF_MS", 5 * 60 * 1000
    )
    PARENT_ELEVATION_RATE_LIMIT_FREE_FAILURES = _get_positive_int(
        "PARENT_ELEVATION_RATE_LIMIT_FREE_FAILURES", 3
    )

    # External identity system (Instant admin API)
    INSTANT_APP_ID = _get("INSTANT_APP_ID", "")
    INSTANT_APP_ADMIN_TOKEN = _get("INSTANT_APP_ADMIN_TOKEN", "")
    INSTANT_API_URI = _get("INSTANT_API_URI", "https://api.instantdb.com")
    INSTANT_WEBSOCKET_URI = _get("INSTANT_WEBSOCKET_URI", "")
    INSTANT_KID_AUTH_ID = _get("INSTANT_KID_AUTH_ID", "family-organizer-kid")
    INSTANT_PARENT_AUTH_ID = _get("INSTANT_PARENT_AUTH_ID", "family-organizer-parent")
    INSTANT_KID_AUTH_EMAIL = _get("INSTANT_KID_AUTH_EMAIL", "")
    INSTANT_PARENT_AUTH_EMAIL = _get("INSTANT_PARENT_AUTH_EMAIL", "")

    # Object storage (S3 compatible)
    S3_ENDPOINT = _get("S3_ENDPOINT", "")
    S3_PUBLIC_ENDPOINT = _get("S3_PUBLIC_ENDPOINT", "")
    S3_BUCKET_NAME = _get("S3_BUCKET_NAME", "")
    S3_ACCESS_KEY_ID = _get("S3_ACCESS_KEY_ID", "")
    S3_SECRET_ACCESS_KEY = _get("S3_SECRET_ACCESS_KEY", "")
    S3_REGION = _get("S3_REGION", "us-east-1")
