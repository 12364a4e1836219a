from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    base_url: str = "http://localhost:8000/api/books"
    # httpx's own default
    timeout_seconds: float = 5.0
    window_title: str = "Library Management System"
    window_width: int = 900
    window_height: int = 600
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="LIBRARY_CLIENT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )
