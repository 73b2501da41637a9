"""
Pointer interaction for the canvas.

One pointer stream drives four mutually exclusive modes (panning, dragging nodes,
marquee selecting, dragging a connection). The mode is picked on pointer down from
what lies under the pointer, updated on every move and resolved on pointer up.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from flow_canvas.canvas import geometry
from flow_canvas.canvas.selection import Marquee, Selection, marquee_hits
from flow_canvas.core.config import settings

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 0
PAN_BUTTON = 1 # middle mouse button
CONTEXT_BUTTON = 2


class Mode(str, Enum):
    IDLE = "idle"
    PANNING = "panning"
    DRAGGING_NODES = "dragging_nodes"
    SELECTING = "selecting"
    DRAGGING_CONNECTION = "dragging_connection"


class TargetKind(str, Enum):
    BACKGROUND = "background"
    NODE = "node"
    CONTROL = "control"
    INPUT_SOCKET = "input_socket"
    OUTPUT_SOCKET = "output_socket"
    UNPLUG = "unplug"


@dataclass(frozen=True)
class PointerTarget:
    kind: TargetKind
    node_id: Optional[str] = None
    connection_id: Optional[str] = None
    control: Optional[str] = None # "edit" or "collapse"


BACKGROUND = PointerTarget(TargetKind.BACKGROUND)


@dataclass
class DragLine:
    """Connection being dragged out of an output socket (or detached from its target)"""
    source_id: str
    current_x: float # world space
    current_y: float
    reconnecting_id: Optional[str] = None


class PointerController:
    """ Finite state machine over pointer down / move / up and wheel events"""

    def __init__(self, transform, layout, connections, selection: Selection,
                 collapsed: Dict[str, bool], node_ids: Callable[[], List[str]],
                 background_drag_pans: bool = None):
        self.transform = transform
        self.layout = layout
        self.connections = connections
        self.selection = selection
        self.collapsed = collapsed
        self.node_ids = node_ids
        self.background_drag_pans = (
            settings.BACKGROUND_DRAG_PANS if background_drag_pans is None else background_drag_pans
        )

        self.mode = Mode.IDLE
        self.marquee: Optional[Marquee] = None
        self.drag_line: Optional[DragLine] = None
        self.last_pointer = (0.0, 0.0)

    def _is_collapsed(self, node_id: str) -> bool:
        return self.collapsed.get(node_id, False)

    def _enter(self, mode: Mode):
        logger.debug("Pointer mode %s -> %s", self.mode.value, mode.value)
        self.mode = mode

    # ---------- HIT TESTING ----------
    def hit_test(self, x: float, y: float, drop: bool = False) -> PointerTarget:
        """Classify what lies under a screen point, topmost first.
        With drop=True input sockets win over unplug handles (they share a spot)."""
        point = self.transform.screen_to_world((x, y))
        nodes = [node_id for node_id in self.node_ids() if node_id in self.layout]
        topmost = list(reversed(nodes))

        for node_id in topmost:
            for name, left, top, right, bottom in geometry.control_boxes(self.layout.get(node_id)):
                if geometry.inside_box(point, left, top, right, bottom):
                    return PointerTarget(TargetKind.CONTROL, node_id=node_id, control=name)

        for node_id in topmost:
            pos = self.layout.get(node_id)
            if geometry.within(point, geometry.output_anchor(pos, self._is_collapsed(node_id)), geometry.SOCKET_RADIUS):
                return PointerTarget(TargetKind.OUTPUT_SOCKET, node_id=node_id)

        unplug = None if drop else self._unplug_at(point)
        if unplug:
            return unplug

        for node_id in topmost:
            pos = self.layout.get(node_id)
            if geometry.within(point, geometry.input_anchor(pos, self._is_collapsed(node_id)), geometry.SOCKET_RADIUS):
                return PointerTarget(TargetKind.INPUT_SOCKET, node_id=node_id)

        for node_id in topmost:
            pos = self.layout.get(node_id)
            bottom = pos.y + geometry.card_height(self._is_collapsed(node_id))
            if geometry.inside_box(point, pos.x, pos.y, pos.x + geometry.CARD_WIDTH, bottom):
                return PointerTarget(TargetKind.NODE, node_id=node_id)

        return BACKGROUND

    def _unplug_at(self, point) -> Optional[PointerTarget]:
        for connection in reversed(list(self.connections)):
            source = self.layout.get(connection.source_id)
            target = self.layout.get(connection.target_id)
            if source is None or target is None:
                continue
            anchor = geometry.input_anchor(target, self._is_collapsed(connection.target_id))
            if geometry.within(point, anchor, geometry.UNPLUG_RADIUS):
                return PointerTarget(TargetKind.UNPLUG, node_id=connection.target_id, connection_id=connection.id)
        return None

    def connection_at(self, x: float, y: float) -> Optional[str]:
        """Id of the topmost rendered connection curve under a screen point"""
        point = self.transform.screen_to_world((x, y))
        for connection in reversed(list(self.connections)):
            source = self.layout.get(connection.source_id)
            target = self.layout.get(connection.target_id)
            if source is None or target is None:
                continue
            start = geometry.output_anchor(source, self._is_collapsed(connection.source_id))
            end = geometry.input_anchor(target, self._is_collapsed(connection.target_id))
            if geometry.distance_to_curve(point, start, end) <= geometry.CURVE_HIT_WIDTH / 2:
                return connection.id
        return None

    # ---------- EVENTS ----------
    def pointer_down(self, x: float, y: float, button: int = PRIMARY_BUTTON,
                     target: Optional[PointerTarget] = None) -> Mode:
        if self.mode != Mode.IDLE:
            return self.mode
        self.last_pointer = (x, y)

        if button == PAN_BUTTON:
            self._enter(Mode.PANNING)
            return self.mode
        if button != PRIMARY_BUTTON:
            return self.mode

        target = target or self.hit_test(x, y)

        if target.kind == TargetKind.NODE:
            self.selection.click(target.node_id)
            self._enter(Mode.DRAGGING_NODES)

        elif target.kind == TargetKind.OUTPUT_SOCKET:
            world_x, world_y = self.transform.screen_to_world((x, y))
            self.drag_line = DragLine(source_id=target.node_id, current_x=world_x, current_y=world_y)
            self._enter(Mode.DRAGGING_CONNECTION)

        elif target.kind == TargetKind.UNPLUG:
            connection = self.connections.get(target.connection_id)
            if connection is None:
                return self.mode
            world_x, world_y = self.transform.screen_to_world((x, y))
            self.drag_line = DragLine(
                source_id=connection.source_id,
                current_x=world_x,
                current_y=world_y,
                reconnecting_id=connection.id,
            )
            self._enter(Mode.DRAGGING_CONNECTION)

        elif target.kind == TargetKind.BACKGROUND:
            if self.background_drag_pans:
                self._enter(Mode.PANNING)
            else:
                self.marquee = Marquee(x, y, x, y)
                self.selection.clear()
                self._enter(Mode.SELECTING)

        # controls are clicks and input sockets only accept drops
        return self.mode

    def pointer_move(self, x: float, y: float):
        dx = x - self.last_pointer[0]
        dy = y - self.last_pointer[1]

        if self.mode == Mode.PANNING:
            self.transform.pan_by(dx, dy)

        elif self.mode == Mode.DRAGGING_NODES:
            delta = self.transform.screen_delta_to_world(dx, dy)
            self.layout.move_positions(self.selection.ids, delta, notify=False)

        elif self.mode == Mode.SELECTING:
            self.marquee.current_x = x
            self.marquee.current_y = y
            self.selection.replace(
                marquee_hits(self.marquee, self.node_ids(), self.layout, self.transform, self.collapsed)
            )

        elif self.mode == Mode.DRAGGING_CONNECTION:
            self.drag_line.current_x, self.drag_line.current_y = self.transform.screen_to_world((x, y))

        self.last_pointer = (x, y)

    def pointer_up(self, x: float, y: float, target: Optional[PointerTarget] = None):
        """Resolve the active mode. Returns the connection created by a connection drag, if any"""
        created = None

        if self.mode == Mode.DRAGGING_NODES:
            self.layout.commit()

        elif self.mode == Mode.SELECTING:
            self.marquee = None

        elif self.mode == Mode.DRAGGING_CONNECTION:
            target = target or self.hit_test(x, y, drop=True)
            created = self._drop_connection(target)
            self.drag_line = None

        self.last_pointer = (x, y)
        if self.mode != Mode.IDLE:
            self._enter(Mode.IDLE)
        return created

    def pointer_leave(self, x: float, y: float):
        """Leaving the canvas ends any interaction as if released over the background"""
        return self.pointer_up(x, y, target=BACKGROUND)

    def _drop_connection(self, target: PointerTarget):
        line = self.drag_line
        valid = target.kind == TargetKind.INPUT_SOCKET and target.node_id != line.source_id

        if line.reconnecting_id:
            original = self.connections.get(line.reconnecting_id)
            if valid and original is not None and original.target_id == target.node_id:
                # dropped back where it was plugged in
                return None
            self.connections.remove(line.reconnecting_id)

        if not valid:
            logger.debug("Connection drag from %s cancelled", line.source_id)
            return None
        return self.connections.add(line.source_id, target.node_id)

    def wheel(self, x: float, y: float, delta_y: float):
        self.transform.wheel((x, y), delta_y)
