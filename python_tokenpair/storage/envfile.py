"""Reading, merging and writing KEY="value" environment files."""

from pathlib import Path
from typing import Dict, Optional, Union
from python_tokenpair.errors import EnvironmentLoadWarning
from python_tokenpair.provision.events import DEGRADED, INFO, EventSink, NullEventSink


EnvironmentRecord = Dict[str, str]


def parse_env(content: str) -> EnvironmentRecord:
    """Parse env file content into a record.
    
    Blank lines and lines starting with # are skipped. Each remaining line
    is split on the first "=". One layer of surrounding double quotes is
    removed from the value, and escaped newlines inside a quoted value are
    restored. Lines without "=" are ignored.
    """
    record: EnvironmentRecord = {}
    # Only "\n" separates lines, other line break characters belong to values
    for line in content.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if "=" not in stripped:
            continue
        
        key, value = stripped.split("=", 1)
        key = key.strip()
        if not key:
            continue
        
        value = value.strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1].replace("\\n", "\n")
        record[key] = value
    return record


def format_env(record: EnvironmentRecord) -> str:
    """Render a record as KEY="value" lines with newlines escaped."""
    lines = []
    for key, value in record.items():
        escaped = value.replace("\n", "\\n")
        lines.append(f'{key}="{escaped}"')
    return "\n".join(lines) + "\n" if lines else ""


class EnvironmentMerger:
    """Loads an existing env file and merges generated values into it."""
    
    def __init__(self, sink: Optional[EventSink] = None):
        self.sink = sink or NullEventSink()
    
    def load(self, path: Union[str, Path]) -> EnvironmentRecord:
        """Load path into a record. Missing or unreadable files give an empty record."""
        path = Path(path)
        if not path.exists():
            self.sink.emit("load_environment", INFO, path=path, detail="no existing env file")
            return {}
        
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            warning = EnvironmentLoadWarning(f"could not read {path}, treating it as empty")
            self.sink.emit("load_environment", DEGRADED, path=path, warning=warning, error=e)
            return {}
        
        return parse_env(content)
    
    @staticmethod
    def merge(existing: EnvironmentRecord, updates: EnvironmentRecord) -> EnvironmentRecord:
        """Return existing with updates applied. Neither argument is modified."""
        merged = dict(existing)
        merged.update(updates)
        return merged
    
    @staticmethod
    def serialize(record: EnvironmentRecord) -> str:
        return format_env(record)
