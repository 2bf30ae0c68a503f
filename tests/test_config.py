from config import Settings


def test_defaults(monkeypatch):
    for name in ("DATABASE_URL", "SEED_DATA", "CORS_ORIGINS", "LOG_LEVEL", "ACCESS_TOKEN_EXPIRE_MINUTES"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)
    assert settings.database_url is None
    assert settings.seed_data is True
    assert settings.cors_origins == ["*"]
    assert settings.access_token_expire_minutes == 1440
    assert settings.algorithm == "HS256"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./lab.db")
    monkeypatch.setenv("SEED_DATA", "false")
    monkeypatch.setenv("CORS_ORIGINS", '["http://localhost:3000", "http://localhost:5173"]')
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")

    settings = Settings(_env_file=None)
    assert settings.database_url == "sqlite:///./lab.db"
    assert settings.seed_data is False
    assert settings.cors_origins == ["http://localhost:3000", "http://localhost:5173"]
    assert settings.log_level == "DEBUG"
    assert settings.access_token_expire_minutes == 30


def test_empty_database_url_means_memory(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "")
    assert Settings(_env_file=None).database_url is None
