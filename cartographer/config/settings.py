from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Service settings loaded from environment variables.

    Environment variables can come from:
    - docker-compose.yml environment section
    - .env file
    - System environment

    Variable names match docker-compose conventions:
    - POSTGRES_HOST, POSTGRES_PORT, etc. (for storage)
    - REDIS_URL, EXPEDITION_QUEUE (for the broker)
    - DEFAULT_DEPTH, DEFAULT_UNKNOWN_MASS (model defaults)
    """

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "cartographer"
    postgres_password: str = "cartographer_pass"
    postgres_db: str = "cartographer"
    database_url: Optional[str] = Field(default=None, validate_default=True)

    # Redis
    redis_url: str = "redis://localhost:6379"
    expedition_queue: str = "queue:expedition"
    dead_letter_queue: Optional[str] = Field(default=None, validate_default=True)
    dequeue_timeout: int = 5

    # Bootstrap: seconds between connection attempts
    connect_retry_interval: float = 5.0

    # Redelivery bound before a message is dead-lettered (0 = unbounded)
    max_deliveries: int = 5

    # Naturalness model defaults for campaigns without explicit config
    default_depth: int = 3
    default_unknown_mass: float = 0.0

    # Model cache bounds (0 = unbounded / never idle)
    max_models: int = 0
    model_idle_ttl: float = 0.0

    # Skip learning an expedition id a model has already learned
    dedupe_redeliveries: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @field_validator('database_url', mode='before')
    @classmethod
    def construct_database_url(cls, v, info):
        """Construct database URL from components if not explicitly set"""
        if v:
            return v

        data = info.data
        host = data.get('postgres_host', 'localhost')
        port = data.get('postgres_port', 5432)
        user = data.get('postgres_user', 'cartographer')
        password = data.get('postgres_password', 'cartographer_pass')
        db = data.get('postgres_db', 'cartographer')

        return f"postgresql://{user}:{password}@{host}:{port}/{db}"

    @field_validator('dead_letter_queue', mode='before')
    @classmethod
    def derive_dead_letter_queue(cls, v, info):
        if v:
            return v
        return f"{info.data.get('expedition_queue', 'queue:expedition')}:dead"

    @field_validator('default_unknown_mass')
    @classmethod
    def check_unknown_mass(cls, v):
        if not 0.0 <= v < 1.0:
            raise ValueError("default_unknown_mass must be in [0, 1)")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
