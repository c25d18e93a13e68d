from pathlib import Path

from pydantic_settings import BaseSettings

# .env 탐색: backend/.env → 프로젝트 루트/.env
_backend_dir = Path(__file__).resolve().parent.parent
_env_candidates = [_backend_dir / ".env", _backend_dir.parent / ".env"]
_env_file = next((p for p in _env_candidates if p.exists()), ".env")


class Settings(BaseSettings):
    model_config = {"env_file": str(_env_file), "env_file_encoding": "utf-8", "extra": "ignore"}

    # Application
    app_env: str = "development"
    debug: bool = True

    # Database
    database_url: str = "sqlite+aiosqlite:///./dossier.db"

    # Storage (public disk)
    storage_root: str = "./storage/public"
    public_base_url: str = "http://localhost:8000"
    max_file_size_kb: int = 4096

    # CORS
    cors_origins: str = "http://localhost:8501"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000


settings = Settings()
