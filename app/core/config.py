from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from backend project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    db_timeout_seconds: int = 10
    auto_create_tables: bool = False

    # Session cookie (signed JWT pointing at an admin_sessions row)
    secret_key: str
    algorithm: str = "HS256"
    session_expire_hours: int = 24
    session_cookie_name: str = "admin_session"
    session_cookie_secure: bool = False

    # Admin bootstrap (POST /api/admin/create). Turn off once the first admin exists.
    allow_admin_setup: bool = True

    # CORS
    cors_origins: str = "http://localhost:5173"

    # WhatsApp deep links
    whatsapp_base_url: str = "https://wa.me"
    whatsapp_country_code: str = "55"
    business_name: str = "Global Tech"

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.env == "production"


settings = Settings()
