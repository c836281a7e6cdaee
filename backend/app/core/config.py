from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "RepuRadar"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql://repuradar_user:repuradar_pass@db:5432/repuradar_db"

    # Security
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours

    # SendGrid for email review requests
    SENDGRID_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "noreply@repuradar.com"
    EMAIL_FROM_NAME: Optional[str] = None

    # Twilio for SMS review requests
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None

    # Outbound provider calls (SendGrid, Twilio)
    PROVIDER_TIMEOUT_SECONDS: int = 30

    # A dispatch claim older than this is treated as abandoned and can be taken over
    DISPATCH_CLAIM_TTL_SECONDS: int = 300

    # Inbound review platform webhooks
    FACEBOOK_WEBHOOK_SECRET: Optional[str] = None
    FACEBOOK_WEBHOOK_VERIFY_TOKEN: Optional[str] = None
    YELP_WEBHOOK_SECRET: Optional[str] = None
    GOOGLE_WEBHOOK_SECRET: Optional[str] = None
    APPLE_WEBHOOK_SECRET: Optional[str] = None

    # Frontend URL (CORS)
    FRONTEND_URL: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
