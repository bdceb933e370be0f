"""Data models shared by the generator, storage and orchestrator."""

from pathlib import Path
from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator


SUPPORTED_MODULUS_LENGTHS = (2048, 4096)
KEY_TYPES = ("access", "refresh")


class KeyPair(BaseModel):
    """An RSA key pair with its encrypted private key and passphrase."""
    
    model_config = ConfigDict(frozen=True)
    
    public_key: str
    private_key: str = Field(repr=False)
    passphrase: str = Field(repr=False)


class TokenKeyPairs(BaseModel):
    """Independent key pairs for access and refresh tokens."""
    
    model_config = ConfigDict(frozen=True)
    
    access: KeyPair
    refresh: KeyPair
    
    def get(self, key_type: str) -> KeyPair:
        if key_type not in KEY_TYPES:
            raise ValueError(f"unknown key type: {key_type}")
        return getattr(self, key_type)


class ProvisioningConfig(BaseModel):
    """Settings for one provisioning run. Defaults live in the config layer."""
    
    model_config = ConfigDict(frozen=True)
    
    key_directory: str
    env_file_name: str
    file_permission_mode: int
    modulus_length: int
    
    @field_validator("key_directory", "env_file_name")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("path must not be empty")
        return value
    
    @field_validator("file_permission_mode")
    @classmethod
    def _valid_mode(cls, value: int) -> int:
        if value < 0 or value > 0o777:
            raise ValueError(f"invalid permission mode: {oct(value)}")
        return value
    
    @field_validator("modulus_length")
    @classmethod
    def _supported_modulus(cls, value: int) -> int:
        if value not in SUPPORTED_MODULUS_LENGTHS:
            raise ValueError(f"unsupported modulus length: {value}")
        return value


class ProvisioningResult(BaseModel):
    """What a completed run wrote to disk."""
    
    model_config = ConfigDict(frozen=True)
    
    key_directory: Path
    key_files: List[Path]
    env_file: Path
    env_keys: List[str]
