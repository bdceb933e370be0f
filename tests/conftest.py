"""Test configuration and fixtures."""

import pytest
from python_tokenpair.crypto.keypair import KeyPairGenerator
from python_tokenpair.models import ProvisioningConfig, TokenKeyPairs


class RecordingEventSink:
    """Event sink that keeps every event for assertions."""
    
    def __init__(self):
        self.events = []
    
    def emit(self, stage, outcome, **details):
        self.events.append((stage, outcome, details))
    
    def outcomes(self, stage):
        return [outcome for s, outcome, _ in self.events if s == stage]
    
    def with_outcome(self, outcome):
        return [(stage, details) for stage, o, details in self.events if o == outcome]


class FixedKeyGenerator:
    """Generator stub that hands out pre-generated pairs."""
    
    def __init__(self, keys: TokenKeyPairs):
        self.keys = keys
        self.calls = []
    
    def generate(self, key_type, modulus_length):
        self.calls.append((key_type, modulus_length))
        return self.keys.get(key_type)


@pytest.fixture(scope="session")
def token_keys():
    """Generate one access and one refresh pair for all tests."""
    generator = KeyPairGenerator()
    return TokenKeyPairs(
        access=generator.generate("access", 2048),
        refresh=generator.generate("refresh", 2048),
    )


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def fixed_generator(token_keys):
    return FixedKeyGenerator(token_keys)


@pytest.fixture
def provisioning_config(tmp_path):
    """Config pointing at a fresh temporary directory."""
    return ProvisioningConfig(
        key_directory=str(tmp_path / "secure-keys"),
        env_file_name=str(tmp_path / ".env"),
        file_permission_mode=0o600,
        modulus_length=2048,
    )
