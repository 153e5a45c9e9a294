from pydantic import field_validator
from pydantic_settings import BaseSettings

OTP_CODE_LENGTH = 6
OTP_TTL_MINUTES = 5


class Settings(BaseSettings):
    PROJECT_NAME: str = "Portfolio API"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/v1"

    # Database (required)
    DATABASE_URL: str

    # OTP
    OTP_RECIPIENT_EMAIL: str = ""
    OTP_LENGTH: int = OTP_CODE_LENGTH
    OTP_EXPIRE_MINUTES: int = OTP_TTL_MINUTES
    OTP_SENDER_LABEL: str = "system@portfolio.com"

    # Mail relay webhook (Google Apps Script)
    MAIL_RELAY_URL: str = ""
    MAIL_RELAY_TIMEOUT_SECONDS: float = 15.0

    # Blog admin key for create/update (required)
    BLOG_ADMIN_KEY: str

    # CORS
    ALLOWED_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("OTP_LENGTH")
    @classmethod
    def _fixed_otp_length(cls, v: int) -> int:
        if v != OTP_CODE_LENGTH:
            raise ValueError(f"OTP_LENGTH is fixed at {OTP_CODE_LENGTH} digits")
        return v

    @field_validator("OTP_EXPIRE_MINUTES")
    @classmethod
    def _fixed_otp_ttl(cls, v: int) -> int:
        if v != OTP_TTL_MINUTES:
            raise ValueError(f"OTP_EXPIRE_MINUTES is fixed at {OTP_TTL_MINUTES} minutes")
        return v

    @property
    def cors_origins(self) -> list[str]:
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def otp_expiry_description(self) -> str:
        return f"expires in {OTP_TTL_MINUTES} minutes"


settings = Settings()
