from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration, read from environment variables or a local .env file"""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./split_ledger.db"
    secret_key: str = "your_secret_key"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Creator included: 3 means "you + 2 others"
    max_group_members: int = 3

    log_level: str = "INFO"


settings = Settings()
