from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Initiative Tracker API"
    database_url: str = "sqlite:///./initiative_tracker.db"
    debug: bool = False
    log_level: str = "INFO"

    # Bearer tokens
    secret_key: str = "dev-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    # Battles
    battle_expiry_hours: int = 8
    lair_initiative: int = 20
    redaction_placeholder: str = "?"

    # Import
    max_import_copies: int = 20

    # Player view
    poll_interval_seconds: float = 0.5

    class Config:
        env_file = ".env"


settings = Settings()
