from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from boot.config import BotConfig, ConfigRepository, get_configuration


def test_channels_normalized():
    config = BotConfig(server="irc.example.net", channels=["Boot", "#boot", " #Chat ", ""])
    assert config.channels == ["#boot", "#chat"]


def test_defaults():
    config = BotConfig(server="irc.example.net")
    assert config.nickname == "boot"
    assert config.port == 6667
    assert config.games is True
    assert config.weather_api_key is None


def test_nickname_must_be_one_token():
    with pytest.raises(ValidationError):
        BotConfig(server="irc.example.net", nickname="two words")


def test_server_required():
    with pytest.raises(ValidationError):
        BotConfig.from_dict({})


def test_repository_accepts_nested_bot_key(tmp_path):
    path = tmp_path / "boot.conf"
    path.write_text(json.dumps({"bot": {"server": "irc.example.net"}}), encoding="utf-8")
    assert ConfigRepository(path).load_raw() == {"server": "irc.example.net"}


def test_repository_missing_or_invalid(tmp_path, caplog):
    assert ConfigRepository(tmp_path / "none").load_raw() == {}
    bad = tmp_path / "bad.conf"
    bad.write_text("{not json", encoding="utf-8")
    assert ConfigRepository(bad).load_raw() == {}
    assert "Configuration load error" in caplog.text
    assert ConfigRepository(tmp_path).load_raw() == {}


def test_get_configuration_from_env(tmp_path, monkeypatch):
    path = tmp_path / "boot.conf"
    path.write_text(json.dumps({"server": "irc.example.net", "channels": ["x"]}), encoding="utf-8")
    monkeypatch.setenv("BOOT_CONF_FILE", str(path))
    config = get_configuration()
    assert config.channels == ["#x"]


def test_get_configuration_exits_on_invalid(tmp_path):
    path = tmp_path / "boot.conf"
    path.write_text(json.dumps({"port": 0}), encoding="utf-8")
    with pytest.raises(SystemExit):
        get_configuration(str(path))


def test_get_configuration_exits_on_missing(tmp_path):
    with pytest.raises(SystemExit):
        get_configuration(str(tmp_path / "missing.conf"))


def test_repository_reads_current_contents(tmp_path):
    path = tmp_path / "boot.conf"
    path.write_text(json.dumps({"server": "a.example"}), encoding="utf-8")
    repo = ConfigRepository(path)
    assert repo.load_raw() == {"server": "a.example"}
    path.write_text(json.dumps({"server": "bb.example.net"}), encoding="utf-8")
    assert repo.load_raw() == {"server": "bb.example.net"}


def test_repository_rejects_non_path():
    with pytest.raises(TypeError):
        ConfigRepository(42)
