import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from flow_canvas.canvas import ConnectionStore, LayoutStore, PointerController, Selection, Transform
from flow_canvas.canvas.geometry import LOCATE_OFFSET
from flow_canvas.canvas.interaction import CONTEXT_BUTTON, TargetKind
from flow_canvas.core.config import settings
from flow_canvas.schemas import (
    AttributeValueUpdate, ChoicesValue, CustomAttributeValue, ImagesValue, NodeQuickEdit, NumberValue, TextValue
)
from flow_canvas.schemas.attribute_schema import empty_value
from flow_canvas.schemas.canvas_schema import MAX_VIEWPORT_SIZE
from flow_canvas.visualization.canvas_visualization import build_scene, generate_canvas_figure, search_nodes

logger = logging.getLogger(__name__)

NODE_TARGETS = (
    TargetKind.NODE, TargetKind.CONTROL, TargetKind.INPUT_SOCKET, TargetKind.OUTPUT_SOCKET, TargetKind.UNPLUG
)


class CanvasSession:
    """ One open canvas: stores, pointer state machine and the collaborator callbacks.

    The collaborator supplies the node list, the node types and the initial layout and
    receives every layout change (positions and connections together), node creation
    requests, content edits and requests to open the full node editor.
    """

    def __init__(self, collaborator, viewport_width: float = None, viewport_height: float = None):
        self.collaborator = collaborator
        self.viewport_width = viewport_width or settings.VIEWPORT_WIDTH
        self.viewport_height = viewport_height or settings.VIEWPORT_HEIGHT

        state = collaborator.canvas_state()
        self.transform = Transform()
        self.layout = LayoutStore(state.positions, on_change=self._emit_layout)
        self.connections = ConnectionStore(state.connections, on_change=self._emit_layout)
        self.selection = Selection()
        self.collapsed: Dict[str, bool] = {}
        self.nodes = []
        self.node_types = []
        self._revision = None

        self.controller = PointerController(
            self.transform, self.layout, self.connections, self.selection, self.collapsed,
            node_ids=lambda: [node.id for node in self.nodes],
        )
        self.refresh()

    def _emit_layout(self):
        self.collaborator.on_layout_change(self.layout.as_dict(), self.connections.as_list())

    # ---------- NODE LIST ----------
    def refresh(self):
        """Reload nodes and node types and place any node that has no position yet"""
        self.nodes = list(self.collaborator.list_nodes())
        self.node_types = list(self.collaborator.list_node_types())
        self._revision = self.collaborator.revision()
        self.layout.ensure_positions([node.id for node in self.nodes])

    def sync(self):
        if self.collaborator.revision() != self._revision:
            self.refresh()

    def get_node(self, node_id: str):
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise HTTPException(status_code=404, detail="Node not found")

    def get_node_type(self, type_id: str):
        for node_type in self.node_types:
            if node_type.id == type_id:
                return node_type
        raise HTTPException(status_code=404, detail="Node type not found")

    # ---------- POINTER ----------
    def pointer_down(self, x: float, y: float, button: int = 0):
        if button == CONTEXT_BUTTON:
            return self.context_click(x, y)
        mode = self.controller.pointer_down(x, y, button)
        return {"mode": mode.value}

    def pointer_move(self, x: float, y: float):
        self.controller.pointer_move(x, y)
        return {"mode": self.controller.mode.value}

    def pointer_up(self, x: float, y: float):
        created = self.controller.pointer_up(x, y)
        return {"mode": self.controller.mode.value, "created": created}

    def pointer_leave(self, x: float, y: float):
        created = self.controller.pointer_leave(x, y)
        return {"mode": self.controller.mode.value, "created": created}

    def wheel(self, x: float, y: float, delta_y: float):
        self.controller.wheel(x, y, delta_y)
        return self.transform.as_dict()

    def context_click(self, x: float, y: float) -> Dict[str, Optional[str]]:
        """Right click: removes a connection under the pointer, or asks to annotate a node"""
        target = self.controller.hit_test(x, y)
        # sockets and handles belong to their node card
        if target.kind in NODE_TARGETS:
            return {"removed": None, "annotate": target.node_id}

        connection_id = self.controller.connection_at(x, y)
        if connection_id:
            self.connections.remove(connection_id)
            return {"removed": connection_id, "annotate": None}
        return {"removed": None, "annotate": None}

    def set_viewport(self, width: float, height: float):
        if not (0 < width <= MAX_VIEWPORT_SIZE and 0 < height <= MAX_VIEWPORT_SIZE):
            raise HTTPException(status_code=422, detail="Viewport size out of range")
        self.viewport_width = width
        self.viewport_height = height

    # ---------- SEARCH / LOCATE ----------
    def search(self, query: str):
        return search_nodes(self.nodes, query)

    def locate(self, node_id: str):
        """Center the viewport on the node and make it the only selected one"""
        self.get_node(node_id)
        pos = self.layout.get(node_id)
        if pos is None:
            return
        anchor = (pos.x + LOCATE_OFFSET[0], pos.y + LOCATE_OFFSET[1])
        self.transform.center_on(anchor, self.viewport_width, self.viewport_height)
        self.selection.replace([node_id])

    # ---------- NODES ----------
    def add_node(self, type_id: str) -> str:
        self.get_node_type(type_id)
        node_id = self.collaborator.on_request_new_node(type_id)
        self.refresh()
        self.selection.replace([node_id])
        logger.info("Added node %s of type %s to the canvas", node_id, type_id)
        return node_id

    def toggle_collapse(self, node_id: str) -> bool:
        self.get_node(node_id)
        self.collapsed[node_id] = not self.collapsed.get(node_id, False)
        return self.collapsed[node_id]

    def set_annotation(self, node_id: str, annotation: str):
        self.get_node(node_id)
        self._change_content(node_id, {"annotation": annotation})

    def quick_edit(self, node_id: str, edit: NodeQuickEdit):
        node = self.get_node(node_id)
        node_type = next((t for t in self.node_types if t.id == node.type_id), None)
        update = {"name": edit.name}
        # description fields only exist on the panel when the node type shows them
        if node_type is None or node_type.show_hints:
            update["hints_description"] = edit.hints_description
        if node_type is None or node_type.show_mechanics:
            update["mechanics_description"] = edit.mechanics_description
        if node_type is None or node_type.show_rewards:
            update["rewards_description"] = edit.rewards_description
        update = {key: value for key, value in update.items() if value is not None}
        if update:
            self._change_content(node_id, update)

    def set_attribute_value(self, node_id: str, attribute_id: str, raw: AttributeValueUpdate):
        """Interpret panel input by the attribute's declared type: text and number replace,
        image appends, select toggles the option"""
        node = self.get_node(node_id)
        node_type = self.get_node_type(node.type_id)
        attribute = next((a for a in node_type.custom_attributes if a.id == attribute_id), None)
        if attribute is None:
            raise HTTPException(status_code=404, detail="Attribute not found")

        current = node.attribute_value(attribute_id) or empty_value(attribute.type)
        if current.kind != attribute.type:
            current = empty_value(attribute.type)

        if attribute.type == "text" and raw.text is not None:
            value = TextValue(text=raw.text)
        elif attribute.type == "number" and raw.number is not None:
            value = NumberValue(number=raw.number)
        elif attribute.type == "image" and raw.image:
            value = ImagesValue(images=current.images + [raw.image])
        elif attribute.type == "select" and raw.option is not None:
            if raw.option not in (attribute.options or []):
                raise HTTPException(status_code=422, detail=f"Unknown option: {raw.option}")
            if raw.option in current.choices:
                value = ChoicesValue(choices=[c for c in current.choices if c != raw.option])
            else:
                value = ChoicesValue(choices=current.choices + [raw.option])
        else:
            raise HTTPException(status_code=422, detail=f"Value does not fit attribute type '{attribute.type}'")

        values = [v for v in node.custom_attribute_values if v.attribute_id != attribute_id]
        values.append(CustomAttributeValue(attribute_id=attribute_id, value=value))
        self._change_content(node_id, {"custom_attribute_values": values})
        return value

    def open_detail(self, node_id: str):
        self.get_node(node_id)
        return self.collaborator.on_request_open_detail(node_id)

    def _change_content(self, node_id: str, partial_update: Dict[str, Any]):
        self.collaborator.on_node_content_change(node_id, partial_update)
        self.refresh()

    # ---------- CONNECTIONS ----------
    def relabel_connection(self, connection_id: str, label: str):
        self.connections.relabel(connection_id, label)

    def remove_connection(self, connection_id: str):
        self.connections.remove(connection_id)

    # ---------- RENDERING ----------
    def scene(self):
        return build_scene(
            self.transform, self.layout, self.connections, self.nodes, self.node_types,
            self.selection, self.collapsed,
            drag_line=self.controller.drag_line,
            marquee=self.controller.marquee,
        )

    def figure(self):
        return generate_canvas_figure(self.scene(), self.viewport_width, self.viewport_height)

    def state(self) -> dict:
        return {
            "positions": self.layout.as_dict(),
            "connections": self.connections.as_list(),
            "transform": self.transform.as_dict(),
            "mode": self.controller.mode.value,
            "selected": self.selection.ids,
            "collapsed": [node_id for node_id, folded in self.collapsed.items() if folded],
        }


class CanvasRegistry:
    """ Open canvas sessions, one per project"""

    def __init__(self):
        self.sessions: Dict[str, CanvasSession] = {}

    def get_session(self, project_id: str, collaborator_factory) -> CanvasSession:
        session = self.sessions.get(project_id)
        if session is None:
            session = CanvasSession(collaborator_factory())
            self.sessions[project_id] = session
            logger.info("Opened canvas for project %s", project_id)
        else:
            session.sync()
        return session

    def close(self, project_id: str):
        self.sessions.pop(project_id, None)

    def clear(self):
        self.sessions.clear()

    def list_projects(self) -> List[str]:
        return list(self.sessions)


registry = CanvasRegistry()


def get_registry():
    return registry
