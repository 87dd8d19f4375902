from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """SDK settings."""

    # Version
    VERSION: str = "0.1.0"

    # Remote Studio API
    STUDIO_API_URL_TEMPLATE: str = "https://{prefix}studioapi.azureml.net/api"
    HTTP_TIMEOUT_SECONDS: float = 60.0

    # Activity polling (pack/unpack)
    POLL_INTERVAL_SECONDS: float = 2.0
    POLL_MAX_ATTEMPTS: int = 300

    # Graph mutation policy
    REQUIRE_UNIQUE_NODE_IDS: bool = False
    STRICT_LOOKUPS: bool = False

    # Resource uploads run on a thread pool of this size
    UPLOAD_WORKERS: int = 4

    class Config:
        env_file = ".env"

settings = Settings()
