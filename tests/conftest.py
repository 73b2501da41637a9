import pytest

from flow_canvas.canvas import ConnectionStore, LayoutStore, PointerController, Selection, Transform
from flow_canvas.core.storage import store
from flow_canvas.schemas import CanvasState, NodeTypeConfig, Position, PuzzleNode
from flow_canvas.services.canvas_services import registry


class RecordingCollaborator:
    """Stands in for the project side of the canvas and records every callback"""

    def __init__(self, nodes, node_types=None, state=None):
        self.nodes = list(nodes)
        self.node_types = list(node_types or [NodeTypeConfig(id="type-puzzle", name="Puzzle", color="#6366f1")])
        self.state = state or CanvasState()
        self.layout_calls = []
        self.content_changes = []
        self.detail_requests = []
        self._revision = 0

    def revision(self):
        return self._revision

    def canvas_state(self):
        return self.state

    def list_nodes(self):
        return list(self.nodes)

    def list_node_types(self):
        return list(self.node_types)

    def on_layout_change(self, positions, connections):
        self.layout_calls.append((positions, connections))

    def on_request_new_node(self, type_id):
        node = PuzzleNode(id=f"new-{len(self.nodes) + 1}", name="New node", type_id=type_id)
        self.nodes.append(node)
        self._revision += 1
        return node.id

    def on_node_content_change(self, node_id, partial_update):
        self.content_changes.append((node_id, partial_update))
        fields = {k: v for k, v in partial_update.items() if k in PuzzleNode.model_fields}
        self.nodes = [n.model_copy(update=fields) if n.id == node_id else n for n in self.nodes]
        self._revision += 1

    def on_request_open_detail(self, node_id):
        self.detail_requests.append(node_id)
        return f"/detail/{node_id}"

    @property
    def last_layout(self):
        return self.layout_calls[-1]


def make_node(node_id, name=None, type_id="type-puzzle", **fields):
    return PuzzleNode(id=node_id, name=name or node_id, type_id=type_id, **fields)


@pytest.fixture
def three_nodes():
    return [make_node("n1", "Gate"), make_node("n2", "Music box"), make_node("n3", "Hidden door")]


@pytest.fixture
def collaborator(three_nodes):
    return RecordingCollaborator(three_nodes)


class CanvasRig:
    """Stores and controller wired together without the session service"""

    def __init__(self, positions, node_ids, connections=None, background_drag_pans=False):
        self.emits = 0
        self.transform = Transform()
        self.layout = LayoutStore({k: Position(x=x, y=y) for k, (x, y) in positions.items()}, on_change=self._count)
        self.connections = ConnectionStore(connections or [], on_change=self._count)
        self.selection = Selection()
        self.collapsed = {}
        self.node_ids = list(node_ids)
        self.controller = PointerController(
            self.transform, self.layout, self.connections, self.selection, self.collapsed,
            node_ids=lambda: self.node_ids, background_drag_pans=background_drag_pans,
        )

    def _count(self):
        self.emits += 1

    def pos(self, node_id):
        p = self.layout.get(node_id)
        return p.x, p.y


@pytest.fixture
def rig():
    # grid placement of three nodes
    return CanvasRig({"n1": (100, 100), "n2": (450, 100), "n3": (800, 100)}, ["n1", "n2", "n3"])


@pytest.fixture(autouse=True)
def clean_app_state():
    store.clear()
    registry.clear()
    yield
    store.clear()
    registry.clear()
