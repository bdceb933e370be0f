"""Key directory creation and permission-aware file writes."""

import contextlib
import os
import secrets
from pathlib import Path
from typing import Optional, Union
from python_tokenpair.errors import DirectoryHardeningWarning, PersistenceError
from python_tokenpair.provision.events import DEGRADED, EventSink, NullEventSink


DIRECTORY_MODE = 0o700
DEFAULT_FILE_MODE = 0o666

PathLike = Union[str, Path]


class SecureStorage:
    """Writes key material to disk.
    
    Directory hardening is best effort and only reported when it fails.
    File writes fall back to default permissions once, then raise
    PersistenceError.
    """
    
    def __init__(self, sink: Optional[EventSink] = None):
        self.sink = sink or NullEventSink()
    
    def ensure_directory(self, path: PathLike) -> None:
        """Create path (and parents) if needed and restrict it to the owner."""
        path = Path(path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"failed to create directory {path}", cause=e) from e
        
        try:
            os.chmod(path, DIRECTORY_MODE)
        except OSError as e:
            warning = DirectoryHardeningWarning(
                f"could not set {oct(DIRECTORY_MODE)} on {path}, using default permissions"
            )
            self.sink.emit("ensure_directory", DEGRADED, path=path, warning=warning, error=e)
    
    def write_protected(self, path: PathLike, content: str, mode: int) -> None:
        """Write content to path with mode, retrying once with default permissions."""
        path = Path(path)
        try:
            self._write_with_mode(path, content, mode)
            return
        except OSError as e:
            self.sink.emit(
                "write_file", DEGRADED, path=path, mode=oct(mode), error=e,
                detail="retrying with default permissions"
            )
        
        try:
            self._write_default(path, content)
        except OSError as e:
            raise PersistenceError(f"failed to write {path}", cause=e) from e
    
    def _write_with_mode(self, path: Path, content: str, mode: int):
        self._replace(path, content, mode)
    
    def _write_default(self, path: Path, content: str):
        self._replace(path, content, None)
    
    def _replace(self, path: Path, content: str, mode: Optional[int]):
        """Write to a sibling temp file and move it over path.
        
        The target keeps its old content until the new content is fully
        written, so a failed attempt never leaves it truncated.
        """
        tmp = path.with_name(f".{path.name}.{secrets.token_hex(4)}.tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_EXCL, DEFAULT_FILE_MODE if mode is None else mode)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                # The creation mode is filtered by umask
                if mode is not None and hasattr(os, "fchmod"):
                    os.fchmod(f.fileno(), mode)
                f.write(content)
            os.replace(tmp, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
            raise
