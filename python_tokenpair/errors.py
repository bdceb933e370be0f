"""Error types raised and reported during provisioning."""

from typing import Optional


class TokenPairError(Exception):
    """Base class for all provisioning failures."""


class ProvisioningError(TokenPairError):
    """A fatal failure that aborts the provisioning run."""
    
    def __init__(self, message: str, stage: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause
    
    def __str__(self) -> str:
        text = self.message
        if self.stage:
            text = f"{self.stage}: {text}"
        if self.cause is not None:
            text = f"{text} ({type(self.cause).__name__}: {self.cause})"
        return text


class KeyGenerationError(ProvisioningError):
    """The RSA primitive could not produce a key pair."""


class KeyValidationError(ProvisioningError):
    """A generated pair failed the sign/verify self-check."""


class PersistenceError(ProvisioningError):
    """Key material or the env file could not be written to disk."""


class DirectoryHardeningWarning(UserWarning):
    """The key directory could not be restricted to owner-only access."""


class EnvironmentLoadWarning(UserWarning):
    """The existing env file could not be read and was treated as empty."""
