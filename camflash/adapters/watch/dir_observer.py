"""
Directory observer that reports file creations by polling.

Usage:
    async with observer.watch(folder, "*.jpg") as session:
        path = await session.wait(timeout=60)

Files present when the watch starts are never reported. The first new match
sets the session's single-shot signal; later creations are ignored.
"""
import asyncio
import contextlib
import fnmatch
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class WatchSession:
    directory: Path
    pattern: str
    detected: asyncio.Event = field(default_factory=asyncio.Event)
    new_file: Optional[Path] = None

    def on_created(self, path: Path) -> None:
        if self.detected.is_set():
            return
        self.new_file = path
        self.detected.set()

    async def wait(self, timeout: float) -> Optional[Path]:
        """Resolve with the first created file, or None once `timeout` elapses."""
        try:
            await asyncio.wait_for(self.detected.wait(), timeout)
        except asyncio.TimeoutError:
            return None
        return self.new_file


class PollingDirectoryObserver:
    def __init__(self, status_store, poll_interval: float = 0.25):
        self.status = status_store
        self.poll_interval = poll_interval
        self.active = 0

    @contextlib.asynccontextmanager
    async def watch(self, directory: Path, pattern: str):
        session = WatchSession(directory=Path(directory), pattern=pattern)
        known = self._snapshot(session.directory, pattern)
        task = asyncio.create_task(self._poll(session, known))
        self.active += 1
        try:
            yield session
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            self.active -= 1

    @staticmethod
    def _matches(name: str, pattern: str) -> bool:
        return fnmatch.fnmatch(name.lower(), pattern.lower())

    def _snapshot(self, directory: Path, pattern: str) -> dict[str, float]:
        found = {}
        with os.scandir(directory) as it:
            for entry in it:
                if entry.is_file() and self._matches(entry.name, pattern):
                    found[entry.name] = entry.stat().st_mtime
        return found

    async def _poll(self, session: WatchSession, known: dict[str, float]) -> None:
        while not session.detected.is_set():
            await asyncio.sleep(self.poll_interval)
            try:
                current = self._snapshot(session.directory, session.pattern)
            except OSError as e:
                self.status.warning(f"observer: cannot scan {session.directory}: {e}")
                continue
            created = [name for name in current if name not in known]
            if created:
                first = min(created, key=lambda n: (current[n], n))
                session.on_created(session.directory / first)
