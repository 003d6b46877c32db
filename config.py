import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///gear_rental.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", 86400)))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("JWT_REFRESH_TOKEN_EXPIRES", 604800)))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "")

    # Reject cart lines with a missing id or bad dates instead of skipping them
    STRICT_LINE_ITEMS = _env_flag("STRICT_LINE_ITEMS")

    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID", "")
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "")
    RAZORPAY_ORDERS_URL = os.getenv("RAZORPAY_ORDERS_URL", "https://api.razorpay.com/v1/orders")

    AADHAAR_API_KEY = os.getenv("AADHAAR_API_KEY", "")
    AADHAAR_GENERATE_OTP_URL = os.getenv(
        "AADHAAR_GENERATE_OTP_URL", "https://sandbox.surepass.io/api/v1/aadhaar-v2/generate-otp"
    )
    AADHAAR_SUBMIT_OTP_URL = os.getenv(
        "AADHAAR_SUBMIT_OTP_URL", "https://sandbox.surepass.io/api/v1/aadhaar-v2/submit-otp"
    )


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    BCRYPT_LOG_ROUNDS = 4
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STRICT_LINE_ITEMS = False
    RAZORPAY_KEY_ID = "rzp_test_key"
    RAZORPAY_KEY_SECRET = "rzp_test_secret"
    AADHAAR_API_KEY = ""


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
