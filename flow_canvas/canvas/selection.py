from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from flow_canvas.canvas.geometry import CARD_WIDTH, card_height


@dataclass
class Marquee:
    """Rectangle dragged over the background, in screen space"""
    start_x: float
    start_y: float
    current_x: float
    current_y: float

    def bounds(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) regardless of drag direction"""
        return (
            min(self.start_x, self.current_x),
            min(self.start_y, self.current_y),
            max(self.start_x, self.current_x),
            max(self.start_y, self.current_y),
        )


def marquee_hits(marquee: Marquee, node_ids: Iterable[str], layout, transform,
                 collapsed: Dict[str, bool]) -> List[str]:
    """Ids whose screen-projected card box overlaps the marquee (open intervals).
    Card height is the fixed value for the collapsed / expanded state, not a measured one."""
    left, top, right, bottom = marquee.bounds()
    hits = []
    for node_id in node_ids:
        pos = layout.get(node_id)
        if pos is None:
            continue
        screen_x, screen_y = transform.world_to_screen((pos.x, pos.y))
        width = CARD_WIDTH * transform.scale
        height = card_height(collapsed.get(node_id, False)) * transform.scale
        if screen_x < right and screen_x + width > left and screen_y < bottom and screen_y + height > top:
            hits.append(node_id)
    return hits


class Selection:
    """Ordered set of selected node ids"""

    def __init__(self):
        self._ids: List[str] = []

    def click(self, node_id: str):
        # clicking a member keeps the whole selection so it can be dragged together
        if node_id not in self._ids:
            self._ids = [node_id]

    def replace(self, node_ids: Iterable[str]):
        self._ids = list(dict.fromkeys(node_ids))

    def clear(self):
        self._ids = []

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __contains__(self, node_id) -> bool:
        return node_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)
