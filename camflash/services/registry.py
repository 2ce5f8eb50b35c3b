import threading


class ConnectionRegistry:
    """Live websocket connections by id. Bookkeeping only; nothing dispatches through it."""

    def __init__(self):
        self._connections: dict[str, object] = {}
        self._lock = threading.Lock()

    def register(self, connection_id: str, handle) -> None:
        with self._lock:
            self._connections[connection_id] = handle

    def unregister(self, connection_id: str) -> bool:
        with self._lock:
            return self._connections.pop(connection_id, None) is not None

    def __contains__(self, connection_id: str) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
