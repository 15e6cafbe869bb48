"""OTP Auth — configuration loaded from environment."""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./otp_auth.db"

    # ── Token signing ─────────────────────────────────────
    secret_key: str = ""
    access_expiry: str = ""  # duration string, e.g. "15m"

    # ── OTP lifecycle ─────────────────────────────────────
    otp_ttl_seconds: int = 120
    otp_rate_limit_max: int = 3
    otp_rate_limit_window_seconds: int = 600
    store_sweep_interval_seconds: float = 60.0

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Auth"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("otp_rate_limit_window_seconds", "store_sweep_interval_seconds")
    @classmethod
    def _must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v


# Singleton settings instance
settings = Settings()
