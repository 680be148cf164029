from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    BUSINESS_NAME: str = "AutoDetail Pro"
    BUSINESS_TIMEZONE: str = "America/Los_Angeles"

    STORE_PROVIDER: str = "json"  # "json" | "memory"
    STORE_DATA_DIR: str = "./data/store"

    OPENAI_API_KEY: str | None = None
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_DIMENSIONS: int = 1536

    KNOWLEDGE_SEARCH_LIMIT: int = 5
    PRICING_INSIGHT_LIMIT: int = 3

    REMINDER_LEAD_HOURS: int = 24
    SERVICE_BUFFER_MINUTES: int = 30
    DEFAULT_SERVICE_MINUTES: int = 60

    PRICING_HISTORY_RETENTION_DAYS: int = 90
    KNOWLEDGE_REFRESH_WINDOW_DAYS: int = 30

    NOTIFICATION_WEBHOOK_URL: str | None = None

    SEED_ON_STARTUP: bool = True


settings = Settings()
