from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    Empty tokens are treated the same as missing ones.
    """

    github_token: str | None = None
    gitlab_token: str | None = None
    github_api_base_url: str = "https://api.github.com"
    github_graphql_url: str = "https://api.github.com/graphql"
    gitlab_api_base_url: str = "https://gitlab.com/api/v4"
    github_max_projects: int = 12
    github_page_size: int = 30
    gitlab_page_size: int = 20
    http_timeout_seconds: float = 20.0
    user_agent: str = "portfolio-feed"
    portfolio_github_username: str | None = None
    portfolio_gitlab_username: str | None = None
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    sentry_event_level: str = "ERROR"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def get_settings() -> Settings:
    return Settings()
