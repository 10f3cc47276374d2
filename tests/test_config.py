import pytest

from geo_mcp.config import DEFAULT_HTTP_PORT, DEFAULT_WS_PORT, Config
from geo_mcp.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("GOOGLE_PLACES_API_KEY", "PORT", "ALLOW_ORIGINS", "HTTP_TIMEOUT", "LOG_LEVEL", "PLACES_API_BASE"):
        monkeypatch.delenv(key, raising=False)


def test_missing_api_key_is_fatal() -> None:
    with pytest.raises(ConfigurationError, match="GOOGLE_PLACES_API_KEY"):
        Config.from_env()


def test_blank_api_key_is_fatal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "   ")
    with pytest.raises(ConfigurationError):
        Config.from_env()


def test_api_key_optional_when_not_required() -> None:
    cfg = Config.from_env(require_api_key=False)
    assert cfg.api_key == ""


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "abc")
    cfg = Config.from_env()
    assert cfg.api_key == "abc"
    assert cfg.port is None
    assert cfg.port_for("http") == DEFAULT_HTTP_PORT == 3001
    assert cfg.port_for("ws") == DEFAULT_WS_PORT == 3000
    assert cfg.http_timeout is None
    assert cfg.allow_origins == ["*"]
    assert cfg.places_api_base == "https://places.googleapis.com/v1"


def test_port_env_overrides_transport_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "abc")
    monkeypatch.setenv("PORT", "8080")
    cfg = Config.from_env()
    assert cfg.port_for("http") == 8080
    assert cfg.port_for("ws") == 8080


def test_bad_port_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "abc")
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ConfigurationError, match="PORT"):
        Config.from_env()


def test_lists_and_bases_are_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "abc")
    monkeypatch.setenv("ALLOW_ORIGINS", "https://a.example, ,https://b.example")
    monkeypatch.setenv("PLACES_API_BASE", "http://localhost:9999/v1/")
    monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    cfg = Config.from_env()
    assert cfg.allow_origins == ["https://a.example", "https://b.example"]
    assert cfg.places_api_base == "http://localhost:9999/v1"
    assert cfg.http_timeout == 2.5
    assert cfg.log_level == "DEBUG"
