import pytest

from config import load_config

ENV_VARS = (
    "API_TOKEN",
    "STORE_BACKEND",
    "DATABASE_URL",
    "DATABASE_PATH",
    "ENV",
    "CORS_ORIGINS",
    "HOST",
    "PORT",
    "SSL_CERTFILE",
    "SSL_KEYFILE",
    "SEED_SAMPLE_DATA",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = load_config()
    assert config.api_token is None
    assert config.open_mode is True
    assert config.store_backend == "sql"
    assert config.database_url == "sqlite:///./timekiosk.db"
    assert config.cors_origins == ["*"]
    assert config.port == 3000
    assert config.seed_sample_data is True
    assert config.tls_enabled is False


def test_postgres_scheme_is_rewritten(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://kiosk:pw@db.internal/timekiosk")
    assert load_config().database_url == "postgresql://kiosk:pw@db.internal/timekiosk"


def test_production_refuses_sqlite(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    with pytest.raises(RuntimeError):
        load_config()


def test_memory_backend_needs_no_database(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("STORE_BACKEND", "memory")
    assert load_config().store_backend == "memory"


def test_unknown_backend_is_rejected(monkeypatch):
    monkeypatch.setenv("STORE_BACKEND", "mongo")
    with pytest.raises(RuntimeError):
        load_config()


def test_cors_and_flags(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://kiosk.example, https://admin.example")
    monkeypatch.setenv("SEED_SAMPLE_DATA", "false")
    monkeypatch.setenv("API_TOKEN", "abc")
    config = load_config()
    assert config.cors_origins == ["https://kiosk.example", "https://admin.example"]
    assert config.seed_sample_data is False
    assert config.open_mode is False


def test_tls_needs_both_files(monkeypatch, tmp_path):
    cert = tmp_path / "fullchain.pem"
    key = tmp_path / "privkey.pem"
    cert.write_text("cert")
    monkeypatch.setenv("SSL_CERTFILE", str(cert))
    monkeypatch.setenv("SSL_KEYFILE", str(key))
    assert load_config().tls_enabled is False

    key.write_text("key")
    assert load_config().tls_enabled is True
