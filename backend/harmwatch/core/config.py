from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    project_name: str = "harm-watch"
    service_name: str = "AI Harm Watch API"
    version: str = "1.0.0"

    # cases.json / evidence.json / users.json live here
    data_dir: str = "./data"

    jwt_secret: str = "dev-jwt-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7

    bcrypt_rounds: int = 10

    default_page_limit: int = 20
    max_page_limit: int = 100
    recent_cases_count: int = 5

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
    ]

    log_level: str = "INFO"
    log_format: str = "text"  # text/json


settings = Settings()
