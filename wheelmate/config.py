#   __          __ _    _  ______  ______  _       __  __            _______  ______
#   \ \        / /| |  | ||  ____||  ____|| |     |  \/  |    /\    |__   __||  ____|
#    \ \  /\  / / | |__| || |__   | |__   | |     | \  / |   /  \      | |   | |__
#     \ \/  \/ /  |  __  ||  __|  |  __|  | |     | |\/| |  / /\ \     | |   |  __|
#      \  /\  /   | |  | || |____ | |____ | |____ | |  | | / ____ \    | |   | |____
#       \/  \/    |_|  |_||______||______||______||_|  |_|/_/    \_\   |_|   |______|
#

# Configuration - Loads application settings from environment variables.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# Settings.cors_origins_list: Returns list of allowed CORS origins.
# Settings.uses_default_secret: True when the JWT secret was never configured.
# get_settings: Returns cached Settings instance.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# DEFAULT_JWT_SECRET: Development-only signing secret.
# Settings: Configuration model matching environment variables.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# pydantic_settings: Settings management.
# functools.lru_cache: Caching.
# typing: Type hints.

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List


DEFAULT_JWT_SECRET = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    log_level: str = "INFO"

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "wheelmate"
    mongodb_timeout_ms: int = 5000

    # Auth
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expiry_hours: int = 3

    # Ratings
    rating_update_max_retries: int = 5

    # CORS
    cors_origins: str = "*"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
