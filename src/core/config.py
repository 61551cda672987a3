from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Dict, Optional


class Settings(BaseSettings):
    SUPABASE_URL: Optional[str] = Field(default=None, env="SUPABASE_URL")
    SUPABASE_KEY: Optional[str] = Field(default=None, env="SUPABASE_KEY")
    SUPABASE_SCHEMA: str = Field("public", env="SUPABASE_SCHEMA")
    STORAGE_BUCKET: str = Field("uploads", env="STORAGE_BUCKET")
    REDIS_URL: str = Field("redis://localhost:6379/0", env="REDIS_URL")
    ADMIN_EMAIL: Optional[str] = Field(default=None, env="ADMIN_EMAIL")
    ADMIN_PASSWORD: Optional[str] = Field(default=None, env="ADMIN_PASSWORD")
    SESSION_COOKIE_NAME: str = Field("dare_session", env="SESSION_COOKIE_NAME")
    # seconds a visitor's contest progress is kept; the admin flag does not expire
    CONTEST_FLOW_TTL: int = Field(2 * 60 * 60, env="CONTEST_FLOW_TTL")
    # slug -> forced open/closed; events without an entry follow their date window
    REGISTRATION_OVERRIDES: Dict[str, bool] = Field(
        default={"math-day-2025": True, "nxtzen-winter-2025": False},
        env="REGISTRATION_OVERRIDES",
    )
    MAX_UPLOAD_BYTES: int = Field(10 * 1024 * 1024, env="MAX_UPLOAD_BYTES")
    CORS_ORIGINS: str = Field("http://localhost:5173", env="CORS_ORIGINS")

    @property
    def store_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)

    @property
    def cors_origins(self):
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
