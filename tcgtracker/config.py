from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "TCG Tracker"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/tcgtracker"

    pokemon_tcg_api_url: str = "https://api.pokemontcg.io/v2"
    pokemon_tcg_api_key: str = ""
    http_timeout: float = 30.0

    # Catalog sync tuning. The source caps pageSize at 250 and publishes no
    # rate limit contract, so the delay is a guess that has held up so far.
    sync_page_size: int = 250
    sync_page_delay: float = 0.1
    sync_progress_interval: int = 50

    # Seconds a proxied search result stays cached
    search_cache_ttl: float = 300.0

    default_page_limit: int = 50
    max_page_limit: int = 250

    cors_origins: list[str] = ["*"]


settings = Settings()
