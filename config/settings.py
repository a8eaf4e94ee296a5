from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Wikidata ───────────────────────────────────────────────
    sparql_endpoint: str = "https://query.wikidata.org/sparql"
    user_agent: str = "CommonsExplorer/1.0 (https://github.com/everypolitician) Python/httpx"
    request_timeout: float = 60.0

    # ── Country repositories ───────────────────────────────────
    github_user: str = "everypolitician"
    github_topic: str = "commons-data"

    # ── Query diagnostics ──────────────────────────────────────
    output_dir: Path = Path("output")
    save_query_used: bool = False
    save_query_results: bool = False

    # ── App ────────────────────────────────────────────────────
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 5000

    @property
    def root_dir(self) -> Path:
        return Path(__file__).parent.parent

    @property
    def queries_dir(self) -> Path:
        return self.output_dir / "queries"


settings = Settings()
