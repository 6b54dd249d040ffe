from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    port: int = 3001
    # Only this origin may call the proxy from a browser
    frontend_url: str = "http://localhost:5173"
    # Where the client-side mirror reaches the proxy
    api_base_url: str = "http://localhost:3001"
    service_name: str = "AI Chat Backend"
    log_level: str = "INFO"

    # Read timeout for outbound provider calls
    request_timeout_seconds: float = 120.0

    # Request gate
    max_body_bytes: int = 10 * 1024 * 1024
    api_rate_limit: int = 100
    api_rate_window_seconds: int = 15 * 60
    chat_rate_limit: int = 30
    chat_rate_window_seconds: int = 60
    brute_force_max_attempts: int = 5
    brute_force_window_seconds: int = 15 * 60

    # Provider endpoints (overridable for self-hosted gateways).
    # OPENAI_BASE_URL / ANTHROPIC_BASE_URL belong to the vendor SDKs, hence UPSTREAM_
    upstream_openrouter_url: str = "https://openrouter.ai/api/v1"
    upstream_openai_url: str = "https://api.openai.com/v1"
    upstream_anthropic_url: str = "https://api.anthropic.com/v1"
    upstream_google_url: str = "https://generativelanguage.googleapis.com/v1beta"
    upstream_anthropic_version: str = "2023-06-01"
    # OpenRouter attribution headers
    openrouter_http_referer: str = "https://ai-chat.app"
    openrouter_app_title: str = "AI Chat"

    # pydantic-settings v2 style config: load env from both ../.env (repo root) and .env
    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=("../.env", ".env"),
        extra="ignore",  # ignore env vars not defined as fields
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
