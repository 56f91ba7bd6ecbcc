from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "micro-documents"

    DATABASE_URL: str = "sqlite+pysqlite:///./documents.db"

    SEARCH_DEFAULT_PAGE_SIZE: int = 10
    SEARCH_MAX_PAGE_SIZE: int = 100
    SEARCH_DEFAULT_SORT_BY: str = "created"
    SEARCH_DEFAULT_SORT_DIRECTION: str = "DESC"


settings = Settings()
