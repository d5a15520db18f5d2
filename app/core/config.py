# app/core/config.py
"""Application configuration using Pydantic."""
from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    database_url: str
    jwt_secret_key: str
    redis_url: str = 'redis://localhost:6379/0'

    app_name: str = 'standstrong'
    app_version: str = '1.0.0'
    environment: str = 'development'
    log_level: str = 'info'
    allowed_origins: List[str] = ['*']

    jwt_algorithm: str = 'HS256'

    cache_enabled: bool = True
    cache_ttl_seconds: int = 300

    db_pool_size: int = 10
    db_max_overflow: int = 20

    # Truncate attendance session dates to UTC midnight before storing them
    normalize_session_dates: bool = False

    model_config = {
        'env_file': '.env',
        'extra': 'ignore'
    }

settings = Settings()
