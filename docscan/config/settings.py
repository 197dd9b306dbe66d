from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    storage_backend: str = "file"
    storage_key: str = "@documents"
    storage_dir: str = "./data"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "docscan"
    db_username: str = "docscan"
    db_password: str = "secret"
    db_table: str = "docscan_storage"

    analysis_provider: str = "openai"
    analysis_api_key: str = ""
    analysis_base_url: str = ""
    analysis_model_name: str = "gpt-4o"
    analysis_timeout_seconds: int = 60
    analysis_temperature: float = 0.1
    analysis_max_tokens: int = 4096
    analysis_image_detail: str = "high"
    translation_temperature: float = 0.3
