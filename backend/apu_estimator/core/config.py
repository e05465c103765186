from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod
    LOG_LEVEL: str | None = Field(default=None)  # DEBUG|INFO|WARNING|ERROR; INFO when unset

    # DB
    DATABASE_URL: str = Field(default="sqlite:///./data/apu_estimator.db")

    # Persisted document (whole project collection lives under this key)
    STORAGE_KEY: str = Field(default="apu-estimator-projects")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost")

    # Files
    EXPORT_DIR: str = Field(default="./data/exports")

    # Business defaults
    IMPORTED_PROJECT_NAME: str = Field(default="Imported project")

    # Text-to-APU generation service
    GENERATOR_URL: str | None = Field(default=None)
    GENERATOR_API_KEY: str | None = Field(default=None)
    GENERATOR_TIMEOUT_S: float = Field(default=30.0)

    # Seed (dev)
    SEED_DEMO: bool = Field(default=False)


settings = Settings()
