# sitehire/config.py
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # Database
    database_username: str
    database_password: str
    database_hostname: str
    database_port: str
    database_name: str
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10

    # "postgres" in production, "memory" for local runs without a database
    store_backend: str = "postgres"

    # Auth
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Platform fee taken from every completed booking
    commission_rate: float = 0.10

    log_level: str = "INFO"

    # CORS
    allowed_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
