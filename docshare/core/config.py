from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./docshare.db"
    database_echo: bool = False
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Ограничение на запись документа, после которого клиент сохраняет черновик локально
    save_timeout_seconds: float = 10.0
    public_token_length: int = 8

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
