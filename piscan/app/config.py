import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///piscan.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "8080"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Placeholder email of the device's designated account until the user registers one
    ANONYMOUS_EMAIL = os.getenv("ANONYMOUS_EMAIL", "anonymous@example.org")

    # Vendor catalog lookup
    DEFAULT_LOCALE = os.getenv("DEFAULT_LOCALE", "us")
    VENDOR_API_URL = os.getenv("VENDOR_API_URL", "http://localhost:8081/amazon/lookup")
    VENDOR_API_KEY = os.getenv("VENDOR_API_KEY", "")
    VENDOR_TIMEOUT = float(os.getenv("VENDOR_TIMEOUT", "10"))
    VENDOR_MAX_ATTEMPTS = int(os.getenv("VENDOR_MAX_ATTEMPTS", "3"))
    VENDOR_BACKOFF = float(os.getenv("VENDOR_BACKOFF", "1"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    VENDOR_API_URL = "http://vendor.test/lookup"
    VENDOR_API_KEY = ""
    VENDOR_MAX_ATTEMPTS = 1
    VENDOR_BACKOFF = 0
