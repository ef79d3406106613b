from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_ENVS = {"dev", "local", "test"}
DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    SCHOOL_NAME: str = "Patika Kindergarten"
    SCHOOL_LOCATION: str = "Patika Kindergarten"
    SCHOOL_TIMEZONE: str = "Europe/Istanbul"
    SCHOOL_EMAIL: str = "info@patika.example"

    STORE_PROVIDER: str = "memory"
    DATA_DIR: str = "./data"

    CODE_LENGTH: int = 6
    BOOKING_CODE_TTL_MINUTES: int = 5
    ADMIN_CODE_TTL_MINUTES: int = 10
    BOOKING_EMAIL_WINDOW_DAYS: int = 10
    UNVERIFIED_BOOKING_HOLD_MINUTES: int | None = None
    DEFAULT_MEETING_MINUTES: int = 30

    ADMIN_EMAIL: str = "admin@patika.example"
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    ADMIN_SESSION_HOURS: int = 24

    EMAILJS_SERVICE_ID: str | None = None
    EMAILJS_TEMPLATE_ID: str | None = None
    EMAILJS_PUBLIC_KEY: str | None = None
    EMAILJS_ENDPOINT: str = "https://api.emailjs.com/api/v1.0/email/send"

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_DRAFT: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_DRAFT: float = 0.4

    @model_validator(mode="after")
    def _require_real_secret(self) -> "Settings":
        if self.ENV.lower() not in DEV_ENVS and self.JWT_SECRET in ("", DEFAULT_JWT_SECRET):
            raise ValueError(f"JWT_SECRET must be set when ENV={self.ENV}")
        return self


settings = Settings()
