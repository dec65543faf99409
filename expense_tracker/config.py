from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_",
        env_file=".env",
        extra="ignore",
    )

    # App settings
    app_title: str = "Expense Tracker"
    currency: str = "USD"
    log_level: str = Field(default="INFO")

    # Data
    seed_path: str = Field(default="data/seed.json")

    # Dashboard
    top_categories_limit: int = Field(default=5, ge=0)
    recent_activity_limit: int = Field(default=5, ge=0)


settings = Settings()


def get_settings() -> Settings:
    return settings
