import logging
from typing import Callable, Iterable, List, Optional
from uuid import uuid4

from flow_canvas.schemas import Connection

logger = logging.getLogger(__name__)


def new_connection_id() -> str:
    return f"conn-{uuid4().hex}"


class ConnectionStore:
    """ Directed, optionally labeled edges between node ids. One edge per ordered pair, no self loops"""

    def __init__(self, connections: Optional[Iterable[Connection]] = None, on_change: Optional[Callable[[], None]] = None):
        self._connections: List[Connection] = []
        self._on_change = on_change
        for connection in connections or []:
            if self._accepts(connection.source_id, connection.target_id):
                self._connections.append(connection.model_copy())

    def _notify(self):
        if self._on_change:
            self._on_change()

    def add(self, source_id: str, target_id: str, label: str = "") -> Optional[Connection]:
        """Append a new edge. Self loops and duplicate pairs are ignored (existing label is kept)"""
        if not self._accepts(source_id, target_id):
            return None

        connection = Connection(id=new_connection_id(), source_id=source_id, target_id=target_id, label=label or "")
        self._connections.append(connection)
        logger.info("Connected %s -> %s (%s)", source_id, target_id, connection.id)
        self._notify()
        return connection.model_copy()

    def _accepts(self, source_id: str, target_id: str) -> bool:
        if source_id == target_id:
            logger.debug("Rejected self loop on %s", source_id)
            return False
        if self.has_pair(source_id, target_id):
            logger.debug("Rejected duplicate connection %s -> %s", source_id, target_id)
            return False
        return True

    def remove(self, connection_id: str):
        remaining = [c for c in self._connections if c.id != connection_id]
        if len(remaining) == len(self._connections):
            return
        self._connections = remaining
        logger.info("Removed connection %s", connection_id)
        self._notify()

    def relabel(self, connection_id: str, label: str):
        connection = self.get(connection_id)
        if connection is None:
            return
        connection.label = label
        self._notify()

    def get(self, connection_id: str) -> Optional[Connection]:
        for connection in self._connections:
            if connection.id == connection_id:
                return connection
        return None

    def has_pair(self, source_id: str, target_id: str) -> bool:
        return any(c.source_id == source_id and c.target_id == target_id for c in self._connections)

    def has_incoming(self, node_id: str) -> bool:
        return any(c.target_id == node_id for c in self._connections)

    def has_outgoing(self, node_id: str) -> bool:
        return any(c.source_id == node_id for c in self._connections)

    def as_list(self) -> List[Connection]:
        return [c.model_copy() for c in self._connections]

    def __iter__(self):
        return iter(list(self._connections))

    def __len__(self) -> int:
        return len(self._connections)
