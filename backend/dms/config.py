from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "DMSData"
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    session_ttl_seconds: int = 8 * 60 * 60
    auth_cookie_name: str = "token"
    # Uploads above this size are rejected before they touch the disk.
    max_upload_bytes: int = 25 * 1024 * 1024

    # Bootstrap account created on first start when no user exists yet.
    admin_email: str = "admin@dms.local"
    admin_password: str = "change-me-now"
    default_department_name: str = "Records Office"
    default_department_code: str = "RECORDS"

    cors_origins: list[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]

    @property
    def db_path(self) -> Path:
        return self.data_path / "dms.sqlite"

    @property
    def files_dir(self) -> Path:
        return self.data_path / "files"

    model_config = {"env_prefix": "DMS_"}


settings = Settings()
