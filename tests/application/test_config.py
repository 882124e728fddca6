import pytest
from pydantic import ValidationError

from flashdeck.application.config import AppConfig, resolve_config


def _write_toml(home, text):
    path = home / ".config/flashdeck/config.toml"
    path.parent.mkdir(parents=True)
    path.write_text(text)
    return path


def test_defaults(mock_home):
    config = AppConfig()

    assert config.cards_per_session == 20
    assert config.available_minutes == 20
    assert config.avg_seconds_per_card == 30
    assert config.forecast_days == 7
    assert config.log_level == "INFO"
    assert config.state_file == mock_home / ".config/flashdeck/state.json"


def test_env_overrides_defaults(monkeypatch):
    monkeypatch.setenv("FLASHDECK_CARDS_PER_SESSION", "5")
    monkeypatch.setenv("FLASHDECK_LOG_LEVEL", "debug")

    config = AppConfig()

    assert config.cards_per_session == 5
    assert config.log_level == "DEBUG"


def test_toml_file_is_read(mock_home):
    _write_toml(mock_home, 'cards_per_session = 7\ndata_dir = "~/cards"\n')

    config = AppConfig()

    assert config.cards_per_session == 7
    assert config.data_dir == (mock_home / "cards").resolve()


def test_home_dotfile_is_read(mock_home):
    (mock_home / ".flashdeck.toml").write_text("forecast_days = 14\n")

    assert AppConfig().forecast_days == 14


def test_precedence(mock_home, monkeypatch):
    _write_toml(mock_home, "cards_per_session = 7\navailable_minutes = 45\nport = 9000\n")
    monkeypatch.setenv("FLASHDECK_CARDS_PER_SESSION", "5")
    monkeypatch.setenv("FLASHDECK_AVAILABLE_MINUTES", "10")

    config = resolve_config({"available_minutes": 15, "port": None})

    assert config.cards_per_session == 5
    assert config.available_minutes == 15
    assert config.port == 9000


@pytest.mark.parametrize(
    "overrides",
    [
        {"cards_per_session": 0},
        {"avg_seconds_per_card": 0},
        {"forecast_days": 400},
        {"log_level": "chatty"},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        resolve_config(overrides)
