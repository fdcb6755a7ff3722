import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Runtime settings for the consultation service."""

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./telemed.db")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Background sweep of elapsed slots and appointments
    ENABLE_SCHEDULER: bool = os.getenv("ENABLE_SCHEDULER", "true").lower() == "true"
    SLOT_SWEEP_INTERVAL_MINUTES: int = int(os.getenv("SLOT_SWEEP_INTERVAL_MINUTES", "30"))

    class Config:
        case_sensitive = True

    @property
    def cors_origins(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
