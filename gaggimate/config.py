from functools import lru_cache

from pydantic import Field
from pydantic_settings import SettingsConfigDict, BaseSettings


class Settings(BaseSettings):
    host: str = Field("localhost", validation_alias="GAGGIMATE_HOST")
    protocol: str = Field("ws", validation_alias="GAGGIMATE_PROTOCOL")
    request_timeout: float = Field(5.0, validation_alias="REQUEST_TIMEOUT")

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_ring_size: int = Field(200, validation_alias="LOG_RING_SIZE")
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", populate_by_name=True, extra="ignore")

    @property
    def http_scheme(self) -> str:
        # The device serves HTTPS exactly when its WebSocket endpoint is wss.
        return "https" if self.protocol == "wss" else "http"

    @property
    def history_url(self) -> str:
        return f"{self.http_scheme}://{self.host}/api/history"


@lru_cache
def get_settings() -> Settings:
    return Settings()
