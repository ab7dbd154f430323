from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    app_name: str = "Tablero de proyectos"

    # Database (stands in for the browser key/value storage)
    database_url: str = "sqlite:///./tablero.db"

    # Seed data, fetched once when nothing is stored yet
    seed_url: str = ""
    seed_timeout: float = 10.0

    # Board
    status_pipeline: str = "current"  # current | legacy
    workday_hours: int = 8
    upcoming_days: int = 30
    at_risk_days: int = 7
    timeline_padding_days: int = 30

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TABLERO_", extra="ignore")

settings = Settings()
