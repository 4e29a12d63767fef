"""Shared fixtures: isolated configuration and seeded fixtures."""

import pytest

from specimen import config as config_module
from specimen.config import EngineConfig, SpecimenConfig
from specimen.fixture import Fixture

ENV_VARS = (
    "SPECIMEN_SEED",
    "SPECIMEN_REPEAT_COUNT",
    "SPECIMEN_RECURSION_DEPTH",
    "SPECIMEN_RECURSION_HANDLER",
    "SPECIMEN_FAKER_LOCALE",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at tmp_path and ignore the caller's environment."""
    config_dir = tmp_path / "specimen-config"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(config_module, "_dotenv_loaded", True)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config_module.reset_config()
    yield config_dir / "config.json"
    config_module.reset_config()


@pytest.fixture
def fixture():
    """A deterministic fixture with default settings."""
    return Fixture(SpecimenConfig(), seed=42)


@pytest.fixture
def omitting_fixture():
    """A fixture whose recursion guard omits instead of raising."""
    return Fixture(SpecimenConfig(engine=EngineConfig(recursion_handler="omit")), seed=42)
