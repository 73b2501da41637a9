import logging
from typing import Callable, Dict, Iterable, Optional, Tuple

from flow_canvas.canvas.geometry import grid_placement
from flow_canvas.schemas import Position

logger = logging.getLogger(__name__)


class LayoutStore:
    """ Owns node id -> world position. Every node shown on the canvas has an entry"""

    def __init__(self, positions: Optional[Dict[str, Position]] = None, on_change: Optional[Callable[[], None]] = None):
        self._positions: Dict[str, Position] = {
            node_id: Position(x=pos.x, y=pos.y) for node_id, pos in (positions or {}).items()
        }
        self._on_change = on_change

    def _notify(self):
        if self._on_change:
            self._on_change()

    def ensure_positions(self, node_ids: Iterable[str]) -> list:
        """Place every id without a position on the auto-layout grid, by its index in node_ids.
        Existing positions are never overwritten. Returns the ids that were placed."""
        placed = []
        for index, node_id in enumerate(node_ids):
            if node_id in self._positions:
                continue
            x, y = grid_placement(index)
            self._positions[node_id] = Position(x=x, y=y)
            placed.append(node_id)

        if placed:
            logger.info("Auto placed %d node(s): %s", len(placed), placed)
            self._notify()
        return placed

    def move_positions(self, node_ids: Iterable[str], delta: Tuple[float, float], notify: bool = True):
        """Translate each listed node by the same world delta. Unknown ids are skipped"""
        dx, dy = delta
        moved = False
        for node_id in node_ids:
            pos = self._positions.get(node_id)
            if pos is None:
                continue
            self._positions[node_id] = Position(x=pos.x + dx, y=pos.y + dy)
            moved = True
        if moved and notify:
            self._notify()

    def set_position(self, node_id: str, position: Position):
        self._positions[node_id] = Position(x=position.x, y=position.y)
        self._notify()

    def commit(self):
        """Emit the current map, used at the end of a drag"""
        self._notify()

    def get(self, node_id: str) -> Optional[Position]:
        return self._positions.get(node_id)

    def as_dict(self) -> Dict[str, Position]:
        return {node_id: pos.model_copy() for node_id, pos in self._positions.items()}

    def __contains__(self, node_id) -> bool:
        return node_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)
