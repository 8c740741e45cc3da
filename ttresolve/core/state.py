import time
from dataclasses import dataclass, field


@dataclass
class RuntimeState:
    """Process-level runtime state (nothing request-scoped lives here)"""
    started_at: float = field(default_factory=time.time)
    ready: bool = False

    @property
    def uptime_seconds(self) -> int:
        return int(time.time() - self.started_at)

state = RuntimeState()
