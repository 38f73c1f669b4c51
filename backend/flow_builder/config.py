"""Application configuration via environment variables."""
from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    app_name: str = "Flow Builder"
    debug: bool = False
    log_level: str = "INFO"
    flows_dir: Path = PROJECT_ROOT / "data" / "flows"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:5000"]

    model_config = {"env_prefix": "FLOWBUILDER_"}


settings = Settings()
settings.flows_dir.mkdir(parents=True, exist_ok=True)
