import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("sql", "memory")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _database_url() -> str:
    """Resolve DATABASE_URL, defaulting to SQLite for local dev."""
    db_path = os.getenv("DATABASE_PATH", "./timekiosk.db")
    env = os.getenv("ENV", "dev").lower()

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        # Guard against SQLite fallback in production
        if env in ("prod", "production"):
            raise RuntimeError(
                "DATABASE_URL missing in production; refusing to start with SQLite. "
                "Please configure DATABASE_URL environment variable."
            )
        database_url = f"sqlite:///{db_path}"

    # Hosting providers hand out postgres:// but SQLAlchemy needs postgresql://
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    return database_url


@dataclass(frozen=True)
class Config:
    api_token: str | None = None
    store_backend: str = "sql"
    database_url: str = "sqlite:///./timekiosk.db"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 3000
    ssl_certfile: str | None = None
    ssl_keyfile: str | None = None
    seed_sample_data: bool = True
    log_level: str = "INFO"

    @property
    def open_mode(self) -> bool:
        """True when no shared secret is configured and any token is accepted."""
        return not self.api_token

    @property
    def tls_enabled(self) -> bool:
        return bool(
            self.ssl_certfile
            and self.ssl_keyfile
            and os.path.isfile(self.ssl_certfile)
            and os.path.isfile(self.ssl_keyfile)
        )


def load_config() -> Config:
    """Build the process configuration from environment variables."""
    store_backend = os.getenv("STORE_BACKEND", "sql").strip().lower()
    if store_backend not in STORE_BACKENDS:
        raise RuntimeError(
            f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {store_backend!r}"
        )

    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    return Config(
        api_token=os.getenv("API_TOKEN") or None,
        store_backend=store_backend,
        database_url=_database_url() if store_backend == "sql" else "",
        cors_origins=origins or ["*"],
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        ssl_certfile=os.getenv("SSL_CERTFILE") or None,
        ssl_keyfile=os.getenv("SSL_KEYFILE") or None,
        seed_sample_data=_env_flag("SEED_SAMPLE_DATA", True),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
