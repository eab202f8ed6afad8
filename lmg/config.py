"""Configuration loaded from environment (.env) and defaults."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Locate the project root .env file regardless of CWD
_THIS_DIR = Path(__file__).resolve().parent          # lmg/
_PROJECT_ROOT = _THIS_DIR.parent                     # project root
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM provider: openai | anthropic
    lmg_llm_provider: str = "openai"

    # OpenAI
    openai_api_key: str | None = None
    lmg_openai_model: str = "gpt-4o-mini"

    # Anthropic
    anthropic_api_key: str | None = None
    lmg_anthropic_model: str = "claude-3-5-sonnet-20241022"

    # Embeddings (OpenAI); vectors are L2-normalised to this length
    lmg_embedding_model: str = "text-embedding-3-small"
    lmg_embedding_dimensions: int = 1536

    # Data directory for the file-backed stores
    lmg_data_dir: str = "./data"

    # Postgres URL; when set, jobs and artifacts live in Postgres
    lmg_database_url: str | None = None

    # Retry coordinator
    lmg_retry_concurrency: int = 3
    lmg_job_timeout_seconds: float = 600.0
    lmg_retry_interval_seconds: float = 6 * 60 * 60

    # Parallel per-artifact calls inside one chunked job (1 = sequential)
    lmg_chunk_workers: int = 1

    lmg_log_level: str = "INFO"

    # Server port (hosting platforms inject PORT)
    port: int = 8000

    @property
    def data_dir(self) -> Path:
        """Get data directory as Path.

        Relative paths are resolved against the project root (not CWD),
        so the CLI and the backend agree on where jobs live.
        """
        p = Path(self.lmg_data_dir)
        if not p.is_absolute():
            return (_PROJECT_ROOT / p).resolve()
        return p.resolve()

    @property
    def jobs_dir(self) -> Path:
        return self.data_dir / "jobs"

    @property
    def artifacts_dir(self) -> Path:
        return self.data_dir / "artifacts"

    def llm_credentials(self, provider_name: str | None = None) -> tuple[str, str | None, str]:
        """Return (provider_name, api_key, model) for the chosen provider."""
        name = (provider_name or self.lmg_llm_provider).lower()
        if name == "anthropic":
            return name, self.anthropic_api_key, self.lmg_anthropic_model
        return name, self.openai_api_key, self.lmg_openai_model

    def ensure_dirs(self) -> None:
        """Ensure all data directories exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.jobs_dir.mkdir(parents=True, exist_ok=True)
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)


def get_settings() -> Settings:
    settings = Settings()
    settings.ensure_dirs()
    return settings
