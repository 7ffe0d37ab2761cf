import os
import secrets
import warnings
from datetime import timedelta

import redis
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


def parse_admin_emails(raw):
    """Parse a comma separated allowlist into a lowercase frozenset"""
    if not raw:
        return frozenset()
    return frozenset(
        email.strip().lower() for email in raw.split(",") if email.strip()
    )


class Config:
    # Generate a secure key if not provided (with a warning)
    _secret_key = os.environ.get("SECRET_KEY")

    if not _secret_key:
        _secret_key = secrets.token_urlsafe(32)
        warnings.warn(
            "🔐 SECRET_KEY not set! Using auto-generated key. "
            "Issued bearer tokens will stop validating on app restart.",
            UserWarning,
        )

    SECRET_KEY = _secret_key

    # JSON API: forms are bound from request bodies, not HTML posts
    WTF_CSRF_ENABLED = False

    def __init__(self):
        """Initialize configuration from the environment"""
        self.SQLALCHEMY_DATABASE_URI = self._build_database_uri()
        # Resolved once per process; request handlers only read app.config
        self.ADMIN_EMAILS = parse_admin_emails(os.environ.get("ADMIN_EMAILS"))

    def _build_database_uri(self):
        """Build database URI from environment variables"""
        database_url = os.environ.get("DATABASE_URL")

        if database_url:
            return database_url

        db_type = os.environ.get("DB_TYPE", "sqlite")

        if db_type.lower() == "postgresql":
            db_host = os.environ.get("DB_HOST") or "localhost"
            db_port = os.environ.get("DB_PORT") or "5432"
            db_name = os.environ.get("DB_NAME") or "tipping_db"
            db_user = os.environ.get("DB_USER") or "tipping_user"
            db_password = os.environ.get("DB_PASSWORD") or "tipping_password"

            return f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
        else:
            # Default to SQLite for development
            return "sqlite:///" + os.path.join(basedir, "tipping.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Competition settings
    PAPER_BET_STAKE = float(os.environ.get("PAPER_BET_STAKE") or 10)
    MIN_ODDS = float(os.environ.get("MIN_ODDS") or 1.01)
    TIMEZONE = os.environ.get("TIMEZONE", "Pacific/Auckland")
    AUTH_EMAIL_DOMAIN = os.environ.get("AUTH_EMAIL_DOMAIN", "teams.tipping.local")

    # Bearer tokens (Flask-JWT-Extended)
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or _secret_key
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(
        seconds=int(os.environ.get("TOKEN_MAX_AGE") or 7 * 24 * 3600)
    )

    # Caching configuration
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "RedisCache")
    CACHE_DEFAULT_TIMEOUT = int(
        os.environ.get("CACHE_DEFAULT_TIMEOUT", 300)
    )  # 5 minutes
    CACHE_REDIS_URL = os.environ.get("CACHE_REDIS_URL", "redis://localhost:6379/0")
    CACHE_KEY_PREFIX = "tipping:"

    # Rate limiting
    RATELIMIT_ENABLED = os.environ.get("RATELIMIT_ENABLED", "True").lower() == "true"

    # Logging configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = os.environ.get("LOG_TO_CONSOLE", "True").lower() == "true"
    LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "True").lower() == "true"
    LOG_DIR = os.environ.get("LOG_DIR", "logs")

    # Environment detection
    FLASK_ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = FLASK_ENV == "development"
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration with helpful defaults"""

    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get("SQLALCHEMY_ECHO", "False").lower() == "true"

    def __init__(self):
        super().__init__()
        # Fallback to SimpleCache if Redis isn't available in development
        try:
            redis_client = redis.Redis.from_url(self.CACHE_REDIS_URL)
            redis_client.ping()
        except redis.exceptions.ConnectionError:
            self.CACHE_TYPE = "SimpleCache"
            warnings.warn(
                "🔶 Redis not available, falling back to SimpleCache for development.",
                UserWarning,
            )


class ProductionConfig(Config):
    """Production configuration with security focus"""

    DEBUG = False

    # In production, require explicit environment variables
    def __init__(self):
        super().__init__()

        if not os.environ.get("SECRET_KEY"):
            warnings.warn(
                "🚨 PRODUCTION WARNING: SECRET_KEY not explicitly set! "
                "Using auto-generated key is not recommended for production.",
                UserWarning,
            )
        if not self.ADMIN_EMAILS:
            warnings.warn(
                "🚨 PRODUCTION WARNING: ADMIN_EMAILS is empty, nobody can use the admin API.",
                UserWarning,
            )


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    DEBUG = False
    CACHE_TYPE = "SimpleCache"
    RATELIMIT_ENABLED = False
    LOG_TO_FILE = False
    LOG_TO_CONSOLE = False

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
        self.ADMIN_EMAILS = parse_admin_emails(
            os.environ.get("TEST_ADMIN_EMAILS", "admin@example.com")
        )


# Configuration mapping
config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
