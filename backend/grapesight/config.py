"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    grapesight_env: str = "development"
    grapesight_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Remote inference services
    verify_url: str = "https://grape-leaf-verificator.onrender.com/predict"
    classify_url: str = "https://grape-disease-classifier.onrender.com/predict"
    http_timeout_s: float | None = None  # None = wait indefinitely

    # Visual simulation
    step_dwell_ms: int = 4000
    surface_retry_ms: int = 100
    canvas_width: int = 400
    canvas_height: int = 300

    # Upload filter
    accepted_content_types: list[str] = ["image/jpeg"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
