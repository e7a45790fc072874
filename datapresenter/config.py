import os
from datetime import timedelta

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL", "sqlite:///" + os.path.join(os.getcwd(), "datapresenter.db"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.getenv("JWT_SECRET", "super-secret-key-please-change-it-in-production")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=int(os.getenv("JWT_EXPIRES_DAYS", "7")))
    JWT_ENCODE_ISSUER = os.getenv("JWT_ISSUER", "MeasurementApp")
    JWT_DECODE_ISSUER = JWT_ENCODE_ISSUER
    JWT_ENCODE_AUDIENCE = os.getenv("JWT_AUDIENCE", "MeasurementAppUsers")
    JWT_DECODE_AUDIENCE = JWT_ENCODE_AUDIENCE
    JWT_ERROR_MESSAGE_KEY = "message"

    # bcrypt only reads 72 bytes; longer passwords are sha256-hashed first
    BCRYPT_HANDLE_LONG_PASSWORDS = True

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    FRONTEND_FOLDER = os.getenv("FRONTEND_FOLDER", os.path.join(BASE_DIR, "frontend"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin-password-123")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    BCRYPT_LOG_ROUNDS = 4
