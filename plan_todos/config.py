from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sqlite_path: str = "data/plan_todos.db"
    log_path: str = "logs/plan_todos.log"
    log_level: str = "INFO"
    timezone: str = "UTC"
    streak_cap: int = 10
    streak_points: int = 3
    completion_weight: float = 0.7
    completion_window_days: int = 7
    streak_window_days: int = 30


settings = Settings()
