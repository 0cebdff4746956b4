import logging

from quick_entry.core import settings
from quick_entry.logger import ColourizedFormatter, get_logging_config


def test_read_config_file(tmp_path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        "# quick entry\n"
        "LOG_LEVEL: debug\n"
        "PARSE_TIMEOUT: 1.5  # seconds\n"
        "TRANSFER_CATEGORY: \"Transfer #1\"\n"
        "OPENAI_MODEL:\n"
        "not a pair\n",
        encoding="utf-8",
    )

    assert settings.read_config_file(str(config)) == {
        "LOG_LEVEL": "debug",
        "PARSE_TIMEOUT": "1.5",
        "TRANSFER_CATEGORY": "Transfer #1",
    }
    assert settings.read_config_file(str(tmp_path / "missing.yaml")) == {}


def test_get_env_float(monkeypatch) -> None:
    monkeypatch.setenv("PARSE_TIMEOUT", "0.5")
    assert settings.get_env_float("PARSE_TIMEOUT", 2.2, min_value=0.0) == 0.5

    monkeypatch.setenv("PARSE_TIMEOUT", "fast")
    assert settings.get_env_float("PARSE_TIMEOUT", 2.2) == 2.2

    monkeypatch.setenv("PARSE_TIMEOUT", "-1")
    assert settings.get_env_float("PARSE_TIMEOUT", 2.2, min_value=0.0) == 2.2


def test_get_env_bool(monkeypatch) -> None:
    monkeypatch.setenv("LOCAL_ONLY", "Yes")
    assert settings.get_env_bool("LOCAL_ONLY") is True

    monkeypatch.setenv("LOCAL_ONLY", "off")
    assert settings.get_env_bool("LOCAL_ONLY", default=True) is False

    monkeypatch.setenv("LOCAL_ONLY", "maybe")
    assert settings.get_env_bool("LOCAL_ONLY") is False


def test_mask_env_value() -> None:
    assert settings._mask_env_value("OPENAI_API_KEY", "sk-abcdef") == "sk...ef"
    assert settings._mask_env_value("OPENAI_MODEL", "gpt-4o-mini") == "gpt-4o-mini"


def test_colourized_formatter_restores_levelname() -> None:
    formatter = ColourizedFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("quick_entry", logging.WARNING, __file__, 1, "careful", None, None)

    assert "\x1b[33m" in formatter.format(record)
    assert record.levelname == "WARNING"


def test_logging_config_adds_file_handler(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = get_logging_config()

    assert config["handlers"]["file"]["filename"].endswith("quick_entry.log")
    assert config["loggers"][""]["level"] == "DEBUG"
    assert config["loggers"]["openai"] == {"level": "WARNING"}
