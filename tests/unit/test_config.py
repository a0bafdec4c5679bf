import pytest

from meeting_summarizer.core.config import AuthSettings, DatabaseSettings, EmailSettings, LLMSettings, Settings


@pytest.mark.parametrize("raw, expected", [
    ("postgres://u:p@db:5432/notes", "postgresql+asyncpg://u:p@db:5432/notes"),
    ("postgresql://u:p@db/notes?sslmode=require", "postgresql+asyncpg://u:p@db/notes?ssl=require"),
    ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
])
def test_database_url_normalisation(raw, expected):
    assert DatabaseSettings(DATABASE_URL=raw).connection_url == expected


def test_chunking_defaults():
    settings = LLMSettings(SUMMARY_CHUNK_THRESHOLD=30000, SUMMARY_CHUNK_SIZE=25000)
    assert settings.chunk_size < settings.chunk_threshold
    assert LLMSettings().gemini_model == "gemini-1.5-flash"


def test_jwks_url_defaults_to_issuer_well_known():
    settings = AuthSettings(AUTH_ISSUER="https://auth.example.com/", AUTH_JWKS_URL="")
    assert settings.resolved_jwks_url == "https://auth.example.com/.well-known/jwks.json"


def test_explicit_jwks_url_wins():
    settings = AuthSettings(AUTH_ISSUER="https://auth.example.com", AUTH_JWKS_URL="https://keys.example.com/jwks")
    assert settings.resolved_jwks_url == "https://keys.example.com/jwks"


def test_email_configured_only_with_credentials():
    assert EmailSettings(SMTP_USER="a@example.com", SMTP_PASSWORD="pw").is_configured
    assert not EmailSettings(SMTP_USER="", SMTP_PASSWORD="").is_configured
    assert EmailSettings().max_recipients == 10


def test_debug_off_unless_enabled(monkeypatch):
    monkeypatch.delenv("DEBUG", raising=False)
    assert Settings(_env_file=None).debug is False

    monkeypatch.setenv("DEBUG", "true")
    assert Settings(_env_file=None).debug is True
