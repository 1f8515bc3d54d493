"""Tests for configuration loading and precedence."""

import argparse
import json

import pytest

from swiftgraft.core.config import CONFIG_FILE_NAME, Config, GenerationConfig
from swiftgraft.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SWIFTGRAFT_GENERATION__BINARY",
        "SWIFTGRAFT_GENERATION__MODEL",
        "SWIFTGRAFT_GENERATION__MAX_RETRIES",
        "SWIFTGRAFT_GENERATION__TIMEOUT_SECONDS",
        "SWIFTGRAFT_GENERATION__PROMPT_MAX_LENGTH",
        "SWIFTGRAFT_DOCUMENTATION_DECLARATIONS",
        "SWIFTGRAFT_TESTS_DIRECTORY",
    ):
        monkeypatch.delenv(name, raising=False)


def _parse(argv):
    parser = argparse.ArgumentParser()
    Config.add_cli_arguments(parser)
    return parser.parse_args(argv)


def test_defaults(tmp_path):
    config = Config.load(start_dir=tmp_path)
    assert config.generation.binary == "ollama"
    assert config.generation.max_retries == 3
    assert config.documentation_declarations == [
        "func",
        "class",
        "struct",
        "init",
        "enum",
        "protocol",
    ]
    assert config.max_file_size == 1024 * 1024


def test_file_is_found_upward(tmp_path):
    (tmp_path / CONFIG_FILE_NAME).write_text(
        json.dumps({"generation": {"model": "llama3"}, "tests_directory": "Tests"})
    )
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    config = Config.load(start_dir=nested)
    assert config.generation.model == "llama3"
    assert config.tests_directory == "Tests"


def test_precedence_file_env_cli(tmp_path, monkeypatch):
    config_file = tmp_path / "custom.json"
    config_file.write_text(
        json.dumps({"generation": {"model": "from-file", "max_retries": 5, "timeout_seconds": 10}})
    )
    monkeypatch.setenv("SWIFTGRAFT_GENERATION__MODEL", "from-env")
    monkeypatch.setenv("SWIFTGRAFT_GENERATION__MAX_RETRIES", "7")

    args = _parse(["--config", str(config_file), "--max-retries", "2"])
    config = Config.load(args=args)

    assert config.generation.model == "from-env"
    assert config.generation.max_retries == 2
    assert config.generation.timeout_seconds == 10


def test_invalid_values_raise_configuration_error(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"generation": {"max_retries": 0}}))
    with pytest.raises(ConfigurationError):
        Config.load(config_path=bad)

    bad.write_text(json.dumps({"documentation_declarations": ["var"]}))
    with pytest.raises(ConfigurationError):
        Config.load(config_path=bad)

    bad.write_text("{not json")
    with pytest.raises(ConfigurationError):
        Config.load(config_path=bad)


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError):
        Config.load(config_path=tmp_path / "nope.json")


def test_bad_env_value(tmp_path, monkeypatch):
    monkeypatch.setenv("SWIFTGRAFT_GENERATION__MAX_RETRIES", "many")
    with pytest.raises(ConfigurationError):
        Config.load(start_dir=tmp_path)


def test_blank_model_rejected():
    with pytest.raises(ValueError):
        GenerationConfig(model="   ")
