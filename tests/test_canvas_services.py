import pytest
from fastapi import HTTPException

from flow_canvas.schemas import (
    AttributeValueUpdate, CanvasState, ChoicesValue, Connection, CustomAttribute, ImagesValue, NodeQuickEdit,
    NodeTypeConfig, NumberValue, Position, TextValue
)
from flow_canvas.services import CanvasRegistry, CanvasSession
from tests.conftest import RecordingCollaborator, make_node


ROOM = NodeTypeConfig(
    id="type-room", name="Room", color="#10b981", show_hints=False,
    custom_attributes=[
        CustomAttribute(id="mood", name="Mood", type="text"),
        CustomAttribute(id="time", name="Time limit", type="number"),
        CustomAttribute(id="refs", name="References", type="image"),
        CustomAttribute(id="tags", name="Tags", type="select", options=["dark", "loud"]),
    ],
)


@pytest.fixture
def session(collaborator):
    return CanvasSession(collaborator, viewport_width=1000, viewport_height=800)


@pytest.fixture
def room_session():
    collaborator = RecordingCollaborator([make_node("r1", "Cellar", type_id="type-room")], node_types=[ROOM])
    return CanvasSession(collaborator)


def positions(session):
    return {node_id: (pos.x, pos.y) for node_id, pos in session.layout.as_dict().items()}


class TestOpening:

    def test_nodes_without_positions_are_placed_on_the_grid(self, session, collaborator):
        assert positions(session) == {"n1": (100, 100), "n2": (450, 100), "n3": (800, 100)}
        assert len(collaborator.layout_calls) == 1

    def test_stored_positions_are_kept(self, three_nodes):
        state = CanvasState(positions={"n2": Position(x=5, y=6)})
        session = CanvasSession(RecordingCollaborator(three_nodes, state=state))
        assert positions(session)["n2"] == (5, 6)
        assert positions(session)["n3"] == (800, 100)

    def test_nothing_emitted_when_every_node_is_placed(self, three_nodes):
        state = CanvasState(positions={n.id: Position(x=0, y=0) for n in three_nodes})
        collaborator = RecordingCollaborator(three_nodes, state=state)
        CanvasSession(collaborator)
        assert collaborator.layout_calls == []

    def test_layout_and_connections_are_emitted_together(self, three_nodes):
        state = CanvasState(connections=[Connection(id="c1", source_id="n1", target_id="n2")])
        collaborator = RecordingCollaborator(three_nodes, state=state)
        CanvasSession(collaborator)
        positions_sent, connections_sent = collaborator.last_layout
        assert set(positions_sent) == {"n1", "n2", "n3"}
        assert [c.id for c in connections_sent] == ["c1"]


class TestPointer:

    def test_drag_emits_only_on_release(self, session, collaborator):
        session.pointer_down(200, 200)
        session.pointer_move(220, 200)
        session.pointer_move(240, 210)
        assert len(collaborator.layout_calls) == 1

        result = session.pointer_up(240, 210)

        assert result == {"mode": "idle", "created": None}
        assert len(collaborator.layout_calls) == 2
        positions_sent, _ = collaborator.last_layout
        assert (positions_sent["n1"].x, positions_sent["n1"].y) == (140, 110)

    def test_connection_drag_reports_created_edge(self, session, collaborator):
        assert session.pointer_down(380, 140) == {"mode": "dragging_connection"}
        result = session.pointer_up(450, 140)
        assert result["created"].target_id == "n2"
        assert [c.target_id for c in collaborator.last_layout[1]] == ["n2"]

    def test_wheel_returns_transform(self, session):
        transform = session.wheel(0, 0, -1000)
        assert transform["scale"] == 2
        assert transform["zoom_percent"] == 200

    def test_context_click_on_node_asks_for_annotation(self, session):
        assert session.context_click(200, 200) == {"removed": None, "annotate": "n1"}

    def test_context_click_on_curve_removes_it(self, session):
        connection = session.connections.add("n1", "n2")
        assert session.pointer_down(415, 140, button=2) == {"removed": connection.id, "annotate": None}
        assert len(session.connections) == 0

    @pytest.mark.parametrize("point, node_id", [((452, 140), "n2"), ((380, 140), "n1")])
    def test_context_click_on_a_socket_keeps_the_connection(self, session, point, node_id):
        session.connections.add("n1", "n2")
        assert session.context_click(*point) == {"removed": None, "annotate": node_id}
        assert len(session.connections) == 1

    def test_context_click_on_empty_canvas(self, session):
        assert session.context_click(600, 600) == {"removed": None, "annotate": None}


class TestLocateAndSearch:

    @pytest.mark.parametrize("width, height", [(0, 800), (-10, 800), (1000, 20000)])
    def test_viewport_out_of_range(self, session, width, height):
        with pytest.raises(HTTPException) as exc:
            session.set_viewport(width, height)
        assert exc.value.status_code == 422
        assert (session.viewport_width, session.viewport_height) == (1000, 800)

    def test_locate_centres_and_selects(self, session):
        session.transform.scale = 2
        session.selection.replace(["n2", "n3"])

        session.locate("n1")

        assert (session.transform.pan_x, session.transform.pan_y) == (20, 0)
        assert session.selection.ids == ["n1"]

    def test_locate_unknown_node(self, session):
        with pytest.raises(HTTPException) as exc:
            session.locate("nope")
        assert exc.value.status_code == 404

    def test_search(self, session):
        assert [n.id for n in session.search("o")] == ["n2", "n3"]


class TestNodes:

    def test_add_node_places_and_selects_it(self, session, collaborator):
        node_id = session.add_node("type-puzzle")
        assert node_id == "new-4"
        assert positions(session)[node_id] == (100, 350)
        assert session.selection.ids == [node_id]
        assert node_id in collaborator.last_layout[0]

    def test_add_node_of_unknown_type(self, session):
        with pytest.raises(HTTPException) as exc:
            session.add_node("type-missing")
        assert exc.value.status_code == 404

    def test_toggle_collapse(self, session):
        assert session.toggle_collapse("n1") is True
        assert session.state()["collapsed"] == ["n1"]
        assert session.toggle_collapse("n1") is False
        assert session.state()["collapsed"] == []

    def test_annotation_goes_through_the_collaborator(self, session, collaborator):
        session.set_annotation("n2", "too easy?")
        assert collaborator.content_changes == [("n2", {"annotation": "too easy?"})]
        assert session.get_node("n2").annotation == "too easy?"

    def test_quick_edit_sends_only_given_fields(self, session, collaborator):
        session.quick_edit("n1", NodeQuickEdit(name="Iron gate", rewards_description="Key"))
        assert collaborator.content_changes == [("n1", {"name": "Iron gate", "rewards_description": "Key"})]
        assert session.get_node("n1").name == "Iron gate"

    def test_quick_edit_skips_hidden_sections(self, room_session):
        room_session.quick_edit("r1", NodeQuickEdit(hints_description="ignored", mechanics_description="Turn valve"))
        assert room_session.collaborator.content_changes == [("r1", {"mechanics_description": "Turn valve"})]

    def test_open_detail(self, session, collaborator):
        assert session.open_detail("n3") == "/detail/n3"
        assert collaborator.detail_requests == ["n3"]


class TestAttributeValues:

    def values(self, session):
        return {v.attribute_id: v.value for v in session.get_node("r1").custom_attribute_values}

    def test_text_and_number_replace(self, room_session):
        room_session.set_attribute_value("r1", "mood", AttributeValueUpdate(text="damp"))
        room_session.set_attribute_value("r1", "mood", AttributeValueUpdate(text="cold"))
        room_session.set_attribute_value("r1", "time", AttributeValueUpdate(number=45))
        values = self.values(room_session)
        assert values["mood"] == TextValue(text="cold")
        assert values["time"] == NumberValue(number=45)

    def test_images_append(self, room_session):
        room_session.set_attribute_value("r1", "refs", AttributeValueUpdate(image="a.png"))
        room_session.set_attribute_value("r1", "refs", AttributeValueUpdate(image="b.png"))
        assert self.values(room_session)["refs"] == ImagesValue(images=["a.png", "b.png"])

    def test_select_toggles(self, room_session):
        room_session.set_attribute_value("r1", "tags", AttributeValueUpdate(option="dark"))
        room_session.set_attribute_value("r1", "tags", AttributeValueUpdate(option="loud"))
        room_session.set_attribute_value("r1", "tags", AttributeValueUpdate(option="dark"))
        assert self.values(room_session)["tags"] == ChoicesValue(choices=["loud"])

    def test_unknown_option(self, room_session):
        with pytest.raises(HTTPException) as exc:
            room_session.set_attribute_value("r1", "tags", AttributeValueUpdate(option="quiet"))
        assert exc.value.status_code == 422

    def test_value_of_wrong_kind(self, room_session):
        with pytest.raises(HTTPException) as exc:
            room_session.set_attribute_value("r1", "time", AttributeValueUpdate(text="soon"))
        assert exc.value.status_code == 422

    def test_unknown_attribute(self, room_session):
        with pytest.raises(HTTPException) as exc:
            room_session.set_attribute_value("r1", "weight", AttributeValueUpdate(number=1))
        assert exc.value.status_code == 404


class TestRegistry:

    def test_sessions_are_reused_and_resynced(self, three_nodes):
        collaborator = RecordingCollaborator(three_nodes)
        registry = CanvasRegistry()
        first = registry.get_session("p1", lambda: collaborator)

        collaborator.nodes.append(make_node("n4", "Attic"))
        collaborator._revision += 1
        second = registry.get_session("p1", lambda: pytest.fail("factory called twice"))

        assert second is first
        assert positions(second)["n4"] == (100, 350)
        assert registry.list_projects() == ["p1"]

        registry.close("p1")
        assert registry.list_projects() == []
