"""Configuration management using pydantic-settings."""
from typing import List

from pydantic_settings import BaseSettings


DEFAULT_API_KEYS = "sk_dev_default_key,sk_prod_default_key"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Deployment
    environment: str = "development"
    port: int = 3000
    log_level: str = "INFO"

    # Credential allow-list for the HTTP routes (comma separated)
    api_keys: str = DEFAULT_API_KEYS

    # CORS: "*" or a comma separated list of origins
    cors_origin: str = "*"
    cors_credentials: bool = False

    # Real-time channel
    ws_path: str = "/ws"
    # Max undelivered events buffered per connected client before dropping
    client_queue_size: int = 256

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def api_key_list(self) -> List[str]:
        """Allow-listed API keys, whitespace trimmed, empties removed."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origin_list(self) -> List[str]:
        if self.cors_origin.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()]

    @property
    def uses_default_api_keys(self) -> bool:
        return "default" in self.api_keys


settings = Settings()
