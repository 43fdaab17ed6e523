from pydantic_settings import BaseSettings

from doccollab.domains.versions.entities import MAX_VERSIONS, MIN_VERSION_INTERVAL


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://doccollab:doccollab@db:5432/doccollab"
    database_echo: bool = False

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Version history
    max_versions: int = MAX_VERSIONS
    min_version_interval_seconds: int = int(MIN_VERSION_INTERVAL.total_seconds())

    # Presence heartbeats older than this are not "active"
    presence_stale_seconds: int = 30

    # 0 disables the background maintenance loop
    maintenance_interval_seconds: int = 5 * 60

    search_limit: int = 20
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
