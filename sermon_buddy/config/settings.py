from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Only needed by scripts that bypass RLS

    # App
    app_name: str = "sermon-buddy"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True

    # Search
    search_rate_limit: str = "60/minute"
    search_results_per_category: int = 3
    search_fail_fast: bool = False  # True: any failed category fails the whole search

    # Feed
    feed_page_size: int = 20
    feed_max_page_size: int = 100

    # Misc listing limits
    notifications_preview_limit: int = 5
    trending_tags_limit: int = 5
    recent_activity_days: int = 7

    # Write church location / sermon metadata to their own jsonb columns
    # instead of the legacy JSON-in-text blobs
    structured_content_columns: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
