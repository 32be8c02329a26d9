"""QuickNotes configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from the environment or a .env file.

    Resolved once at startup. Switching backends requires a restart.
    """

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "QUICKNOTES_",
    }

    # Backend selection
    use_remote_store: bool = False
    remote_base_address: str = "http://localhost:3001/api"
    request_timeout: float = 10.0

    # Local store
    storage_path: Path = Path("quicknotes_data.json")
    storage_slot: str = "notes"

    # Reference server
    server_host: str = "0.0.0.0"
    server_port: int = 3001

    log_level: str = "INFO"

    @property
    def backend_name(self) -> str:
        """Label of the selected backend, used in logs and metrics."""
        return "remote" if self.use_remote_store else "local"


settings = Settings()
