from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "coin-api"
    env: str = "development"

    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    metrics_app_label: str = "coin-api"
    collect_default_metrics: bool = True

    random_flip_min: int = 1
    random_flip_max: int = 100
    max_flip_times: int = 1_000_000

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    @model_validator(mode="after")
    def validate_random_flip_range(self) -> "Settings":
        if self.random_flip_min < 1:
            raise ValueError("RANDOM_FLIP_MIN must be at least 1")
        if self.random_flip_max < self.random_flip_min:
            raise ValueError("RANDOM_FLIP_MAX must not be lower than RANDOM_FLIP_MIN")
        if self.max_flip_times < self.random_flip_max:
            raise ValueError("MAX_FLIP_TIMES must not be lower than RANDOM_FLIP_MAX")
        return self

    @property
    def global_labels(self) -> dict[str, str]:
        return {"app": self.metrics_app_label}


@lru_cache
def get_settings() -> Settings:
    return Settings()
