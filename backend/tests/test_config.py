"""Settings parsing."""

from stockroom.core.config import Settings


def test_heroku_postgres_url_is_rewritten():
    settings = Settings(database_url="postgres://u:p@db.example.com:5432/shop")
    assert settings.database_url == "postgresql+psycopg://u:p@db.example.com:5432/shop"


def test_other_urls_are_untouched():
    settings = Settings(database_url="sqlite:///local.db")
    assert settings.database_url == "sqlite:///local.db"


def test_log_level_is_normalised():
    assert Settings(log_level=" debug ").log_level == "DEBUG"


def test_default_page_limit(monkeypatch):
    monkeypatch.setenv("DEFAULT_PAGE_LIMIT", "25")
    assert Settings().default_page_limit == 25
