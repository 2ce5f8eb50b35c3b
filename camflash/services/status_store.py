import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, List

logger = logging.getLogger("camflash")

MAX_LOG_LINES = 200


@dataclass
class StatusStore:
    busy: bool = False
    last_error: Optional[str] = None
    logs: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def set_busy(self, v: bool):
        self.busy = v

    def log(self, msg: str, level: int = logging.INFO):
        logger.log(level, msg)
        # captures log from the threadpool while sessions log from the event loop
        with self._lock:
            self.logs.append(msg)
            del self.logs[:-MAX_LOG_LINES]

    def recent_logs(self) -> List[str]:
        with self._lock:
            return list(self.logs)

    def warning(self, msg: str):
        self.log(msg, logging.WARNING)

    def error(self, msg: str):
        self.last_error = msg
        self.log(msg, logging.ERROR)
