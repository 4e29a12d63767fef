"""Tests for configuration loading, env overrides and the global singleton."""

import json
import logging
import os

import pytest

from specimen import config as config_module
from specimen.config import (
    EngineConfig,
    GeneratorConfig,
    SpecimenConfig,
    configure,
    get_config,
    reset_config,
)


class TestDefaults:
    def test_default_values(self):
        config = SpecimenConfig()
        assert config.engine.repeat_count == 3
        assert config.engine.recursion_depth == 1
        assert config.engine.recursion_handler == "raise"
        assert config.generator.seed is None
        assert config.generator.faker_locale == "en_US"

    def test_to_dict(self):
        data = SpecimenConfig(generator=GeneratorConfig(seed=4)).to_dict()
        assert data["engine"]["repeat_count"] == 3
        assert data["generator"] == {"seed": 4, "faker_locale": "en_US"}


class TestValidation:
    def test_negative_repeat_count(self):
        with pytest.raises(ValueError, match="repeat_count"):
            SpecimenConfig(engine=EngineConfig(repeat_count=-1))

    def test_zero_repeat_count_allowed(self):
        assert SpecimenConfig(engine=EngineConfig(repeat_count=0)).engine.repeat_count == 0

    def test_recursion_depth_below_one(self):
        with pytest.raises(ValueError, match="recursion_depth"):
            SpecimenConfig(engine=EngineConfig(recursion_depth=0))

    def test_unknown_recursion_handler(self):
        with pytest.raises(ValueError, match="recursion_handler"):
            SpecimenConfig(engine=EngineConfig(recursion_handler="ignore"))


class TestLoad:
    def test_load_without_file_gives_defaults(self):
        assert SpecimenConfig.load() == SpecimenConfig()

    def test_save_and_load(self, isolated_config):
        config = SpecimenConfig(
            engine=EngineConfig(repeat_count=5, recursion_handler="omit"),
            generator=GeneratorConfig(seed=11),
        )
        config.save()

        assert isolated_config.exists()
        loaded = SpecimenConfig.load()
        assert loaded.engine.repeat_count == 5
        assert loaded.engine.recursion_handler == "omit"
        assert loaded.generator.seed == 11

    def test_corrupt_file_falls_back_to_defaults(self, isolated_config, caplog):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("{not json")
        with caplog.at_level(logging.WARNING, logger="specimen.config"):
            config = SpecimenConfig.load()
        assert config == SpecimenConfig()
        assert any("Failed to load config" in r.getMessage() for r in caplog.records)

    def test_invalid_file_values_fall_back_to_defaults(self, isolated_config):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(json.dumps({"engine": {"repeat_count": -3}}))
        assert SpecimenConfig.load().engine.repeat_count == 3

    def test_unknown_file_keys_are_ignored(self, isolated_config, caplog):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            json.dumps({"engine": {"repeat_count": 4, "colour": "red"}})
        )
        with caplog.at_level(logging.WARNING, logger="specimen.config"):
            config = SpecimenConfig.load()
        assert config.engine.repeat_count == 4
        assert any("engine.colour" in r.getMessage() for r in caplog.records)


class TestEnvOverrides:
    def test_env_overrides_file(self, monkeypatch):
        SpecimenConfig(engine=EngineConfig(repeat_count=5)).save()
        monkeypatch.setenv("SPECIMEN_REPEAT_COUNT", "7")
        monkeypatch.setenv("SPECIMEN_SEED", "21")
        monkeypatch.setenv("SPECIMEN_RECURSION_HANDLER", "null")
        monkeypatch.setenv("SPECIMEN_RECURSION_DEPTH", "2")
        monkeypatch.setenv("SPECIMEN_FAKER_LOCALE", "nl_NL")

        config = SpecimenConfig.load()
        assert config.engine.repeat_count == 7
        assert config.engine.recursion_handler == "null"
        assert config.engine.recursion_depth == 2
        assert config.generator.seed == 21
        assert config.generator.faker_locale == "nl_NL"

    def test_invalid_env_values_are_ignored(self, monkeypatch, caplog):
        monkeypatch.setenv("SPECIMEN_REPEAT_COUNT", "many")
        monkeypatch.setenv("SPECIMEN_RECURSION_DEPTH", "0")
        monkeypatch.setenv("SPECIMEN_RECURSION_HANDLER", "skip")
        monkeypatch.setenv("SPECIMEN_SEED", "abc")

        with caplog.at_level(logging.WARNING, logger="specimen.config"):
            config = SpecimenConfig.load()
        assert config == SpecimenConfig()
        messages = [r.getMessage() for r in caplog.records]
        assert len([m for m in messages if m.startswith("Invalid SPECIMEN_")]) == 4

    def test_file_only_load_skips_env(self, monkeypatch):
        monkeypatch.setenv("SPECIMEN_SEED", "21")
        assert SpecimenConfig.load(env=False).generator.seed is None

    def test_dotenv_is_read_once(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("SPECIMEN_REPEAT_COUNT=9\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(config_module, "_dotenv_loaded", False)
        try:
            assert SpecimenConfig.load().engine.repeat_count == 9
            assert config_module._dotenv_loaded
        finally:
            os.environ.pop("SPECIMEN_REPEAT_COUNT", None)


class TestGlobalConfig:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_configure_replaces_global(self):
        config = SpecimenConfig(engine=EngineConfig(repeat_count=1))
        configure(config)
        assert get_config() is config

    def test_configure_validates(self):
        config = SpecimenConfig()
        config.engine.recursion_handler = "bogus"
        with pytest.raises(ValueError):
            configure(config)

    def test_reset_forces_reload(self):
        configure(SpecimenConfig(engine=EngineConfig(repeat_count=1)))
        reset_config()
        assert get_config().engine.repeat_count == 3
