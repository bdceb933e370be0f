"""Drives key generation, key file persistence and the env file merge."""

from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar
from python_tokenpair.crypto.keypair import KeyPairGenerator
from python_tokenpair.errors import PersistenceError, ProvisioningError
from python_tokenpair.models import KeyPair, ProvisioningConfig, ProvisioningResult, TokenKeyPairs
from python_tokenpair.provision.events import FAILURE, START, SUCCESS, EventSink, NullEventSink
from python_tokenpair.storage.envfile import EnvironmentMerger, EnvironmentRecord
from python_tokenpair.storage.secure import SecureStorage


T = TypeVar("T")

KEY_FILE_NAMES = {
    ("access", "public"): "access-public.pem",
    ("access", "private"): "access-private.pem",
    ("refresh", "public"): "refresh-public.pem",
    ("refresh", "private"): "refresh-private.pem",
}


def key_file_path(key_directory: Path, key_type: str, kind: str) -> Path:
    return key_directory / KEY_FILE_NAMES[(key_type, kind)]


def env_entries(key_type: str, pair: KeyPair, public_path: Path, private_path: Path) -> EnvironmentRecord:
    """The five env variables owned for one key type."""
    prefix = f"{key_type.upper()}_TOKEN"
    return {
        f"{prefix}_PUBLIC_KEY_PATH": str(public_path),
        f"{prefix}_PRIVATE_KEY_PATH": str(private_path),
        f"{prefix}_PRIVATE_KEY_PASSPHRASE": pair.passphrase,
        f"{prefix}_PUBLIC_KEY": pair.public_key,
        f"{prefix}_PRIVATE_KEY": pair.private_key,
    }


class ProvisioningOrchestrator:
    """Generates access and refresh key pairs and persists them.
    
    Stages run strictly in order and the first failure aborts the run.
    Files already written are left in place. The env file is written last,
    so it is untouched unless every key file reached disk.
    
    Two runs must not target the same env file at the same time; the
    read-merge-write sequence is not locked.
    """
    
    def __init__(
        self,
        config: ProvisioningConfig,
        sink: Optional[EventSink] = None,
        generator: Optional[KeyPairGenerator] = None,
        storage: Optional[SecureStorage] = None,
        merger: Optional[EnvironmentMerger] = None,
    ):
        self.config = config
        self.sink = sink or NullEventSink()
        self.generator = generator or KeyPairGenerator()
        self.storage = storage or SecureStorage(self.sink)
        self.merger = merger or EnvironmentMerger(self.sink)
        self.key_directory = Path(config.key_directory).absolute()
        self.env_file = Path(config.env_file_name)
    
    def _stage(self, stage: str, func: Callable[..., T], *args) -> T:
        """Run one stage, reporting start/success/failure to the sink."""
        self.sink.emit(stage, START)
        try:
            result = func(*args)
        except ProvisioningError as e:
            if e.stage is None:
                e.stage = stage
            self.sink.emit(stage, FAILURE, error=e)
            raise
        except OSError as e:
            self.sink.emit(stage, FAILURE, error=e)
            raise PersistenceError("filesystem operation failed", stage=stage, cause=e) from e
        self.sink.emit(stage, SUCCESS)
        return result
    
    def generate_keys(self) -> TokenKeyPairs:
        """Generate both key pairs without touching the filesystem."""
        modulus = self.config.modulus_length
        access = self._stage("generate_access_key", self.generator.generate, "access", modulus)
        refresh = self._stage("generate_refresh_key", self.generator.generate, "refresh", modulus)
        return TokenKeyPairs(access=access, refresh=refresh)
    
    def _write_key_files(self, keys: TokenKeyPairs) -> Dict[tuple, Path]:
        mode = self.config.file_permission_mode
        paths = {}
        for key_type in ("access", "refresh"):
            pair = keys.get(key_type)
            for kind, content in (("public", pair.public_key), ("private", pair.private_key)):
                path = key_file_path(self.key_directory, key_type, kind)
                self.storage.write_protected(path, content, mode)
                paths[(key_type, kind)] = path
        return paths
    
    def _key_entries(self, keys: TokenKeyPairs, paths: Dict[tuple, Path]) -> EnvironmentRecord:
        updates: EnvironmentRecord = {}
        for key_type in ("access", "refresh"):
            updates.update(env_entries(
                key_type,
                keys.get(key_type),
                paths[(key_type, "public")],
                paths[(key_type, "private")],
            ))
        return updates
    
    def persist(self, keys: TokenKeyPairs) -> ProvisioningResult:
        """Write the four key files, then merge the key entries into the env file."""
        self._stage("ensure_directory", self.storage.ensure_directory, self.key_directory)
        paths = self._stage("write_key_files", self._write_key_files, keys)
        
        existing = self._stage("load_environment", self.merger.load, self.env_file)
        updates = self._key_entries(keys, paths)
        merged = self._stage("merge_environment", self.merger.merge, existing, updates)
        content = self.merger.serialize(merged)
        self._stage(
            "write_environment",
            self.storage.write_protected,
            self.env_file,
            content,
            self.config.file_permission_mode,
        )
        
        return ProvisioningResult(
            key_directory=self.key_directory,
            key_files=list(paths.values()),
            env_file=self.env_file,
            env_keys=list(updates.keys()),
        )
    
    def provision(self) -> ProvisioningResult:
        """Generate both pairs and persist them."""
        keys = self.generate_keys()
        return self.persist(keys)


def provision(config: ProvisioningConfig, sink: Optional[EventSink] = None) -> ProvisioningResult:
    """Run a full provisioning pass for config."""
    return ProvisioningOrchestrator(config, sink=sink).provision()
