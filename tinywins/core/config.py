from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./tinywins.db"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://tinywins.app,https://api.tinywins.app"
    CORS_ORIGINS: str = "*"

    # IANA zone used to bucket reflection notes into calendar days.
    LOCAL_TIMEZONE: str = "UTC"

    # Streak lengths (days) that earn a celebration, comma-separated.
    REFLECTION_STREAK_MILESTONES: str = "7,14,30"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" | "json"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def streak_milestones_list(self) -> list[int]:
        return sorted(
            int(v.strip()) for v in self.REFLECTION_STREAK_MILESTONES.split(",") if v.strip()
        )


settings = Settings()
