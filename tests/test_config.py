"""Tests for configuration management."""

import pytest
from pydantic import ValidationError
from python_tokenpair.config.config import Config, parse_mode, parse_modulus
from python_tokenpair.models import ProvisioningConfig


ENV_VARS = ["TOKENPAIR_KEY_DIR", "TOKENPAIR_ENV_FILE", "TOKENPAIR_PERMISSIONS", "TOKENPAIR_MODULUS", "TOKENPAIR_LOG"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and working directory."""
    for key in ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_config_defaults():
    """Test default configuration values."""
    config = Config()
    
    assert config.key_directory == "secure-keys"
    assert config.env_file == ".env"
    assert config.file_permissions == 0o644
    assert config.modulus_length == 2048
    assert config.log_level == "minimal"


def test_config_from_yaml(tmp_path):
    """Test loading configuration from the default YAML location."""
    (tmp_path / "tokenpair.yaml").write_text("""
keys:
  directory: "keys"
  permissions: "600"
  modulus: 4096

env:
  file: "config/.env.local"

log:
  level: "all"
""")
    
    config = Config.load()
    
    assert config.key_directory == "keys"
    assert config.file_permissions == 0o600
    assert config.modulus_length == 4096
    assert config.env_file == "config/.env.local"
    assert config.log_level == "all"


def test_config_explicit_path(tmp_path):
    """An explicit path is used instead of the search list."""
    (tmp_path / "tokenpair.yaml").write_text("keys:\n  directory: ignored\n")
    custom = tmp_path / "custom.yaml"
    custom.write_text("keys:\n  directory: chosen\n")
    
    config = Config.load(str(custom))
    
    assert config.key_directory == "chosen"


def test_config_from_env(monkeypatch, tmp_path):
    """Environment variables override YAML."""
    (tmp_path / "tokenpair.yaml").write_text("keys:\n  directory: from-yaml\n")
    monkeypatch.setenv("TOKENPAIR_KEY_DIR", "from-env")
    monkeypatch.setenv("TOKENPAIR_ENV_FILE", ".env.prod")
    monkeypatch.setenv("TOKENPAIR_PERMISSIONS", "0o640")
    monkeypatch.setenv("TOKENPAIR_MODULUS", "4096")
    monkeypatch.setenv("TOKENPAIR_LOG", "all")
    
    config = Config.load()
    
    assert config.key_directory == "from-env"
    assert config.env_file == ".env.prod"
    assert config.file_permissions == 0o640
    assert config.modulus_length == 4096
    assert config.log_level == "all"


def test_invalid_env_values(monkeypatch):
    monkeypatch.setenv("TOKENPAIR_PERMISSIONS", "rw-r--r--")
    with pytest.raises(ValueError, match="invalid octal"):
        Config.load()
    
    monkeypatch.setenv("TOKENPAIR_PERMISSIONS", "600")
    monkeypatch.setenv("TOKENPAIR_MODULUS", "big")
    with pytest.raises(ValueError, match="invalid modulus"):
        Config.load()


def test_parse_helpers():
    assert parse_mode("600") == 0o600
    assert parse_mode("0o755") == 0o755
    assert parse_mode(0o600) == 0o600
    assert parse_modulus("2048") == 2048
    with pytest.raises(ValueError):
        parse_mode("9")


def test_provisioning_config():
    """The loaded settings freeze into a validated ProvisioningConfig."""
    config = Config()
    provisioning = config.provisioning_config()
    
    assert provisioning == ProvisioningConfig(
        key_directory="secure-keys",
        env_file_name=".env",
        file_permission_mode=0o644,
        modulus_length=2048,
    )
    with pytest.raises(ValidationError):
        provisioning.modulus_length = 4096


@pytest.mark.parametrize("overrides", [
    {"modulus_length": 1024},
    {"modulus_length": 3000},
    {"file_permission_mode": 0o1777},
    {"file_permission_mode": -1},
    {"key_directory": ""},
    {"env_file_name": "   "},
])
def test_provisioning_config_rejects(overrides):
    values = {
        "key_directory": "secure-keys",
        "env_file_name": ".env",
        "file_permission_mode": 0o644,
        "modulus_length": 2048,
    }
    values.update(overrides)
    
    with pytest.raises(ValidationError):
        ProvisioningConfig(**values)
