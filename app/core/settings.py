from typing import Literal, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    APP_NAME: str = "User Console"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["local", "dev", "staging", "prod"] = "local"
    DEBUG: bool = False
    CORS_ORIGINS: str = "*"      # CSV o '*'
    LOG_LEVEL: str = "INFO"

    # Backend
    BASE_URL: str = "http://localhost:8080"
    BACKEND_API_PREFIX: str = "/api/v1"
    HTTP_TIMEOUT_SEC: float = 15.0

    # Listing cache window
    USERS_REVALIDATE_SECONDS: float = 30.0

    # -------- validators (presencia, formato) --------
    @field_validator("BASE_URL")
    @classmethod
    def _normalize_base_url(cls, v: str) -> str:
        v = (v or "").strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("BASE_URL must start with http:// or https://")
        return v

    @field_validator("BACKEND_API_PREFIX")
    @classmethod
    def _normalize_prefix(cls, v: str) -> str:
        v = (v or "").strip().strip("/")
        return f"/{v}" if v else ""

    @field_validator("HTTP_TIMEOUT_SEC", "USERS_REVALIDATE_SECONDS")
    @classmethod
    def _positive(cls, v: float, info):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @property
    def CORS_ORIGINS_LIST(self) -> List[str]:
        return ["*"] if self.CORS_ORIGINS.strip() == "*" else [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def BACKEND_API_URL(self) -> str:
        return f"{self.BASE_URL}{self.BACKEND_API_PREFIX}"

settings = Settings()
