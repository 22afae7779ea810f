from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Loan Intake API"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./loan_intake.db"
    # The status gateway is called from anonymous browsers, so CORS is open by default
    cors_origins: str = "*"

    # Bearer token accepted for the admin review console
    admin_api_token: str = "change-me"

    # Client side
    api_base_url: str = "http://127.0.0.1:3005"
    poll_interval_seconds: float = 5.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
