"""Configuration defaults and loading for the token pair generator."""

import os
from pathlib import Path
from typing import Optional
import yaml
from python_tokenpair.models import ProvisioningConfig


CONFIG_PATHS = [
    "tokenpair.yaml",
    "configs/tokenpair.yaml",
    "/etc/tokenpair/config.yaml",
]


def parse_mode(value) -> int:
    """Parse a permission mode given as an octal string ("600") or an int."""
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lower().startswith("0o"):
        text = text[2:]
    try:
        return int(text, 8)
    except ValueError:
        raise ValueError(f"invalid octal permissions: {value!r}")


def parse_modulus(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"invalid modulus length: {value!r}")


class Config:
    """Settings with defaults, overridable by YAML, environment and CLI."""
    
    def __init__(self):
        self.key_directory: str = "secure-keys"
        self.env_file: str = ".env"
        self.file_permissions: int = 0o644
        self.modulus_length: int = 2048
        self.log_level: str = "minimal"
    
    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load configuration from a YAML file and environment variables."""
        config = cls()
        
        config_paths = [path] if path else CONFIG_PATHS
        for candidate in config_paths:
            if Path(candidate).exists():
                with open(candidate, 'r') as f:
                    yaml_config = yaml.safe_load(f)
                    if yaml_config:
                        config._load_from_dict(yaml_config)
                break
        
        # Override with environment variables
        config._load_from_env()
        
        return config
    
    def _load_from_dict(self, data: dict):
        """Load configuration from dictionary."""
        keys_config = data.get("keys") or {}
        self.key_directory = keys_config.get("directory", self.key_directory)
        if "permissions" in keys_config:
            self.file_permissions = parse_mode(keys_config["permissions"])
        if "modulus" in keys_config:
            self.modulus_length = parse_modulus(keys_config["modulus"])
        
        env_config = data.get("env") or {}
        self.env_file = env_config.get("file", self.env_file)
        
        log_config = data.get("log") or {}
        self.log_level = log_config.get("level", self.log_level)
    
    def _load_from_env(self):
        """Load configuration from environment variables."""
        self.key_directory = os.getenv("TOKENPAIR_KEY_DIR", self.key_directory)
        self.env_file = os.getenv("TOKENPAIR_ENV_FILE", self.env_file)
        
        permissions = os.getenv("TOKENPAIR_PERMISSIONS")
        if permissions:
            self.file_permissions = parse_mode(permissions)
        
        modulus = os.getenv("TOKENPAIR_MODULUS")
        if modulus:
            self.modulus_length = parse_modulus(modulus)
        
        self.log_level = os.getenv("TOKENPAIR_LOG", self.log_level)
    
    def provisioning_config(self) -> ProvisioningConfig:
        """Freeze the current settings into a ProvisioningConfig."""
        return ProvisioningConfig(
            key_directory=self.key_directory,
            env_file_name=self.env_file,
            file_permission_mode=self.file_permissions,
            modulus_length=self.modulus_length,
        )
