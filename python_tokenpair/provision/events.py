"""Stage event sinks for provisioning runs."""

import sys
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, TextIO


START = "start"
SUCCESS = "success"
FAILURE = "failure"
DEGRADED = "degraded"
INFO = "info"


class EventSink(Protocol):
    """Receives one notification per stage transition."""
    
    def emit(self, stage: str, outcome: str, **details: Any) -> None:
        ...


class NullEventSink:
    """Discards every event."""
    
    def emit(self, stage: str, outcome: str, **details: Any) -> None:
        pass


class PrintEventSink:
    """Print events as key=value lines.
    
    The "minimal" level only shows degradations and failures, "all" shows
    every event. Degradations and failures go to stderr.
    """
    
    LEVELS = ("minimal", "all")
    
    def __init__(self, level: str = "minimal", out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        if level not in self.LEVELS:
            raise ValueError(f"unknown log level: {level}")
        self.level = level
        self.out = out
        self.err = err
    
    def emit(self, stage: str, outcome: str, **details: Any) -> None:
        noisy = outcome in (DEGRADED, FAILURE)
        if self.level == "minimal" and not noisy:
            return
        
        ts = datetime.now(timezone.utc).isoformat()
        parts = [f"ts={ts}", f"stage={stage}", f"outcome={outcome}"]
        for key, value in details.items():
            if isinstance(value, BaseException):
                value = f"{type(value).__name__}: {value}"
            parts.append(f"{key}={value}")
        
        stream = (self.err or sys.stderr) if noisy else (self.out or sys.stdout)
        print(" ".join(parts), file=stream)
