"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    JSON_SORT_KEYS = False

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        # Try DB_* variables (Docker style)
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'distributor')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'distributor')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'distributor')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'
    DB_POOL_SIZE = int(os.getenv('DB_POOL_SIZE', '10'))
    DB_MAX_OVERFLOW = int(os.getenv('DB_MAX_OVERFLOW', '20'))

    # Bearer tokens
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    JWT_EXPIRES_SECONDS = int(os.getenv('JWT_EXPIRES_SECONDS', str(3600 * 24)))

    # Order placement
    # lock_timeout for the reservation transaction (PostgreSQL only, 0 = wait forever)
    ORDER_LOCK_TIMEOUT_MS = int(os.getenv('ORDER_LOCK_TIMEOUT_MS', '5000'))
    ORDER_ALLOW_EMPTY = os.getenv('ORDER_ALLOW_EMPTY', 'true').lower() == 'true'
    DISCOUNT_LOOKUP_STRICT = os.getenv('DISCOUNT_LOOKUP_STRICT', 'false').lower() == 'true'

    # Roles that only see their own orders
    RESTRICTED_ROLES = {
        r.strip() for r in os.getenv('RESTRICTED_ROLES', 'Distributor').split(',') if r.strip()
    }

    # Listings
    DEFAULT_PER_PAGE = int(os.getenv('DEFAULT_PER_PAGE', '20'))
    MAX_PER_PAGE = int(os.getenv('MAX_PER_PAGE', '200'))

    # Error tracking
    SENTRY_DSN = os.getenv('SENTRY_DSN')
