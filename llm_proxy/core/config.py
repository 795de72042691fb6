from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_proxy.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Provider credentials, validated lazily via require()
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""

    # Identity verification (Google ID tokens)
    auth_enabled: bool = True
    google_client_id: str = ""

    # Usage quota; leave REDIS_URL empty to disable
    redis_url: str = ""
    daily_quota: int = 50

    # Upstream calls
    upstream_timeout: float = 60.0
    anthropic_version: str = "2023-06-01"
    transcription_model: str = "whisper-1"
    upload_dir: str = ""  # empty = system temp dir

    # App
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 3000

    # CORS
    allowed_origins: str = "*"  # comma-separated

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    def require(self, name: str) -> str:
        """Return a setting value, raising ConfigurationError if it is empty."""
        value = getattr(self, name, "")
        if not value:
            raise ConfigurationError(f"Missing env var: {name.upper()}")
        return value


settings = Settings()
