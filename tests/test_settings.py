"""Tests for wxbot.settings."""

import configparser

import pytest

from wxbot.config_validation import SEVERITY_ERROR, SEVERITY_WARNING, validate_config
from wxbot.settings import (
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WEATHER_API_URL,
    credential,
    load_discord_settings,
    load_weather_settings,
    parse_snowflake,
    resolve_path,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DISCORD_TOKEN", "OPENWEATHER_API_KEY", "CLIENT_ID", "GUILD_ID"):
        monkeypatch.delenv(name, raising=False)


class TestParseSnowflake:
    """Tests for parse_snowflake()."""

    @pytest.mark.parametrize("value,expected", [
        ("123456789012345678", 123456789012345678),
        (' "42" ', 42),
        ("", None),
        (None, None),
        ("abc", None),
    ])
    def test_values(self, value, expected):
        assert parse_snowflake(value) == expected


class TestResolvePath:

    def test_relative(self, tmp_path):
        assert resolve_path("data/locations.json", tmp_path) == tmp_path.resolve() / "data" / "locations.json"

    def test_absolute(self, tmp_path):
        target = tmp_path / "abs.json"
        assert resolve_path(str(target), "/elsewhere") == target


class TestLoadSettings:
    """Tests for load_weather_settings() and load_discord_settings()."""

    def test_defaults(self, minimal_config, tmp_path):
        settings = load_weather_settings(minimal_config, tmp_path)
        assert settings.api_key == "test-key"
        assert settings.locations_file == tmp_path.resolve() / "data" / "locations.json"
        assert settings.weather_api_url == DEFAULT_WEATHER_API_URL
        assert settings.request_timeout == DEFAULT_REQUEST_TIMEOUT

    def test_config_overrides(self, minimal_config, tmp_path):
        minimal_config.set("Bot", "locations_file", "saved.json")
        minimal_config.set("Weather", "request_timeout", "3.5")
        minimal_config.set("Weather", "weather_api_url", "http://localhost/weather")
        settings = load_weather_settings(minimal_config, tmp_path)
        assert settings.locations_file.name == "saved.json"
        assert settings.request_timeout == 3.5
        assert settings.weather_api_url == "http://localhost/weather"

    def test_environment_takes_precedence(self, minimal_config, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENWEATHER_API_KEY", "env-key")
        monkeypatch.setenv("DISCORD_TOKEN", "env-token")
        monkeypatch.setenv("GUILD_ID", "777")
        assert load_weather_settings(minimal_config, tmp_path).api_key == "env-key"
        discord_settings = load_discord_settings(minimal_config)
        assert discord_settings.token == "env-token"
        assert discord_settings.guild_id == 777
        assert discord_settings.client_id is None

    def test_missing_sections(self, tmp_path):
        config = configparser.ConfigParser()
        settings = load_weather_settings(config, tmp_path)
        assert settings.api_key == ""
        assert load_discord_settings(config).token == ""

    def test_settings_are_frozen(self, minimal_config, tmp_path):
        settings = load_weather_settings(minimal_config, tmp_path)
        with pytest.raises(AttributeError):
            settings.api_key = "other"

    def test_quoted_credentials_are_unquoted(self, minimal_config, tmp_path):
        minimal_config.set("Weather", "api_key", '"KEY123"')
        minimal_config.set("Discord", "token", "'abc.def'")
        minimal_config.set("Discord", "guild_id", '"555"')
        assert load_weather_settings(minimal_config, tmp_path).api_key == "KEY123"
        discord_settings = load_discord_settings(minimal_config)
        assert discord_settings.token == "abc.def"
        assert discord_settings.guild_id == 555

    def test_runtime_and_validator_agree_on_quoted_values(self, tmp_path):
        config_file = tmp_path / "config.ini"
        config_file.write_text(
            '[Bot]\ncommand_prefix = !\n\n[Discord]\ntoken = "abc.def"\n\n[Weather]\napi_key = "KEY123"\n'
        )
        results = validate_config(str(config_file))
        assert [r for r in results if r[0] in (SEVERITY_ERROR, SEVERITY_WARNING)] == []

        config = configparser.ConfigParser()
        config.read(config_file)
        assert load_weather_settings(config, tmp_path).api_key == "KEY123"
        assert load_discord_settings(config).token == "abc.def"

    def test_quoted_environment_value(self, minimal_config, monkeypatch, tmp_path):
        monkeypatch.setenv("OPENWEATHER_API_KEY", '"env-key"')
        assert load_weather_settings(minimal_config, tmp_path).api_key == "env-key"


class TestCredential:
    """Tests for credential()."""

    def test_empty_environment_falls_back_to_config(self, minimal_config, monkeypatch):
        monkeypatch.setenv("DISCORD_TOKEN", "   ")
        assert credential(minimal_config, "DISCORD_TOKEN", "Discord", "token") == "test-token"

    def test_missing_option(self, minimal_config):
        assert credential(minimal_config, "CLIENT_ID", "Discord", "client_id") == ""
