"""
Canvas rendering.

build_scene() turns the canvas state into a renderable description (world-space
geometry plus the transform), generate_canvas_figure() draws that description as a
plotly figure in screen space.
"""
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import plotly.graph_objects as go

from flow_canvas.canvas import geometry
from flow_canvas.core.config import settings
from flow_canvas.schemas.attribute_schema import format_attribute_value

DEFAULT_NODE_COLOR = "#cbd5e1"
SELECTED_COLOR = "#6366f1"
EDGE_COLOR = "#cbd5e1"
GRID_COLOR = "#e2e8f0"
BACKGROUND_COLOR = "#f8fafc"
NOT_SET = "Not set"


@dataclass(frozen=True)
class GridSpec:
    cell_size: float # world units
    screen_cell: float
    offset_x: float
    offset_y: float


@dataclass(frozen=True)
class EdgeCurve:
    connection_id: str
    source_id: str
    target_id: str
    start: Tuple[float, float]
    end: Tuple[float, float]
    path: str # svg path in world space
    label: str
    label_position: Tuple[float, float]


@dataclass(frozen=True)
class PreviewCurve:
    source_id: str
    start: Tuple[float, float]
    end: Tuple[float, float]
    path: str
    reconnecting_id: Optional[str] = None


@dataclass(frozen=True)
class CardSection:
    title: str
    text: str


@dataclass(frozen=True)
class NodeCard:
    node_id: str
    name: str
    type_name: str
    color: str
    border_color: str
    x: float
    y: float
    width: float
    height: float
    collapsed: bool
    selected: bool
    input_anchor: Tuple[float, float]
    output_anchor: Tuple[float, float]
    input_filled: bool
    output_filled: bool
    annotation: Optional[str]
    sections: Tuple[CardSection, ...]
    attributes: Tuple[CardSection, ...]


@dataclass(frozen=True)
class CanvasScene:
    pan_x: float
    pan_y: float
    scale: float
    zoom_percent: int
    grid: GridSpec
    edges: Tuple[EdgeCurve, ...]
    preview: Optional[PreviewCurve]
    cards: Tuple[NodeCard, ...]
    marquee: Optional[Tuple[float, float, float, float]] # screen space


def section_text(description: Optional[str], tags: Iterable[str]) -> str:
    """Free text wins, then the tag list, then a placeholder"""
    if description:
        return description
    joined = ", ".join(tags)
    return joined or NOT_SET


def card_sections(node, node_type) -> Tuple[CardSection, ...]:
    if node_type is None:
        return ()
    sections = []
    if node_type.show_hints:
        sections.append(CardSection("Hints", section_text(node.hints_description, node.hints)))
    if node_type.show_mechanics:
        sections.append(CardSection(
            "Mechanics", section_text(node.mechanics.mechanics_description, node.mechanics.types)
        ))
    if node_type.show_rewards:
        sections.append(CardSection("Rewards", section_text(node.rewards_description, node.rewards)))
    return tuple(sections)


def card_attributes(node, node_type) -> Tuple[CardSection, ...]:
    if node_type is None:
        return ()
    previews = []
    for attribute in node_type.custom_attributes:
        value = node.attribute_value(attribute.id)
        text = format_attribute_value(value) if value is not None else ""
        if text:
            previews.append(CardSection(attribute.name, text))
    return tuple(previews)


def build_grid(transform, cell_size: float = None) -> GridSpec:
    cell_size = cell_size or settings.GRID_SIZE
    screen_cell = cell_size * transform.scale
    return GridSpec(
        cell_size=cell_size,
        screen_cell=screen_cell,
        offset_x=transform.pan_x % screen_cell,
        offset_y=transform.pan_y % screen_cell,
    )


def build_scene(transform, layout, connections, nodes, node_types, selection,
                collapsed: Dict[str, bool], drag_line=None, marquee=None) -> CanvasScene:
    """Project the canvas state into a scene. Connections with a missing endpoint are skipped"""
    types_by_id = {t.id: t for t in node_types}

    def is_collapsed(node_id):
        return collapsed.get(node_id, False)

    edges = []
    for connection in connections:
        source = layout.get(connection.source_id)
        target = layout.get(connection.target_id)
        if source is None or target is None:
            continue
        start = geometry.output_anchor(source, is_collapsed(connection.source_id))
        end = geometry.input_anchor(target, is_collapsed(connection.target_id))
        edges.append(EdgeCurve(
            connection_id=connection.id,
            source_id=connection.source_id,
            target_id=connection.target_id,
            start=start,
            end=end,
            path=geometry.curve_path(start, end),
            label=connection.label or "",
            label_position=((start[0] + end[0]) / 2, (start[1] + end[1]) / 2),
        ))

    preview = None
    if drag_line is not None:
        source = layout.get(drag_line.source_id)
        if source is not None:
            start = geometry.output_anchor(source, is_collapsed(drag_line.source_id))
            end = (drag_line.current_x, drag_line.current_y)
            preview = PreviewCurve(
                source_id=drag_line.source_id,
                start=start,
                end=end,
                path=geometry.curve_path(start, end),
                reconnecting_id=drag_line.reconnecting_id,
            )

    cards = []
    for node in nodes:
        pos = layout.get(node.id)
        if pos is None:
            continue
        node_type = types_by_id.get(node.type_id)
        color = node_type.color if node_type else DEFAULT_NODE_COLOR
        selected = node.id in selection
        folded = is_collapsed(node.id)
        cards.append(NodeCard(
            node_id=node.id,
            name=node.name,
            type_name=node_type.name if node_type else "NODE",
            color=color,
            border_color=SELECTED_COLOR if selected else color,
            x=pos.x,
            y=pos.y,
            width=geometry.CARD_WIDTH,
            height=geometry.card_height(folded),
            collapsed=folded,
            selected=selected,
            input_anchor=geometry.input_anchor(pos, folded),
            output_anchor=geometry.output_anchor(pos, folded),
            input_filled=connections.has_incoming(node.id),
            output_filled=connections.has_outgoing(node.id),
            annotation=node.annotation or None,
            sections=() if folded else card_sections(node, node_type),
            attributes=() if folded else card_attributes(node, node_type),
        ))

    return CanvasScene(
        pan_x=transform.pan_x,
        pan_y=transform.pan_y,
        scale=transform.scale,
        zoom_percent=transform.zoom_percent,
        grid=build_grid(transform),
        edges=tuple(edges),
        preview=preview,
        cards=tuple(cards),
        marquee=marquee.bounds() if marquee is not None else None,
    )


def _to_screen(scene: CanvasScene, point):
    return point[0] * scene.scale + scene.pan_x, point[1] * scene.scale + scene.pan_y


def grid_lines(grid: GridSpec, width: float, height: float):
    """x / y lists of all grid lines, separated by None so they plot as one trace"""
    grid_x, grid_y = [], []
    x = grid.offset_x
    while x <= width:
        grid_x += [x, x, None]
        grid_y += [0, height, None]
        x += grid.screen_cell
    y = grid.offset_y
    while y <= height:
        grid_x += [0, width, None]
        grid_y += [y, y, None]
        y += grid.screen_cell
    return grid_x, grid_y


def generate_canvas_figure(scene: CanvasScene, width: float = None, height: float = None) -> go.Figure:
    """Generate a Plotly figure of the canvas in screen space (y grows downwards)."""
    width = width or settings.VIEWPORT_WIDTH
    height = height or settings.VIEWPORT_HEIGHT
    fig = go.Figure()
    shapes, annotations = [], []

    # grid
    grid_x, grid_y = grid_lines(scene.grid, width, height)
    fig.add_trace(go.Scatter(
        x=grid_x, y=grid_y, mode="lines", line=dict(color=GRID_COLOR, width=0.5),
        hoverinfo="skip", name="Grid"
    ))

    # connections, control points follow the endpoints through the affine transform
    for edge in scene.edges:
        path = geometry.curve_path(_to_screen(scene, edge.start), _to_screen(scene, edge.end))
        shapes.append(dict(type="path", path=path, line=dict(color=EDGE_COLOR, width=3 * scene.scale)))
        if edge.label:
            lx, ly = _to_screen(scene, edge.label_position)
            annotations.append(dict(x=lx, y=ly, text=edge.label, showarrow=False,
                                    bgcolor="white", bordercolor="#e2e8f0", font=dict(size=9, color="#64748b")))

    if scene.preview is not None:
        path = geometry.curve_path(_to_screen(scene, scene.preview.start), _to_screen(scene, scene.preview.end))
        shapes.append(dict(type="path", path=path, line=dict(color=SELECTED_COLOR, width=2, dash="dash")))

    # node cards
    for card in scene.cards:
        x0, y0 = _to_screen(scene, (card.x, card.y))
        x1, y1 = _to_screen(scene, (card.x + card.width, card.y + card.height))
        shapes.append(dict(type="rect", x0=x0, y0=y0, x1=x1, y1=y1, fillcolor="white",
                           line=dict(color=card.border_color, width=4 if card.selected else 2)))

        lines = [f"<span style='color:{card.color}'>{card.type_name}</span>", f"<b>{card.name}</b>"]
        for section in card.sections + card.attributes:
            lines.append(f"<i>{section.title}</i>: {section.text}")
        annotations.append(dict(x=x0 + 12 * scene.scale, y=y0 + 12 * scene.scale, text="<br>".join(lines),
                                showarrow=False, xanchor="left", yanchor="top", align="left",
                                font=dict(size=max(6, 11 * scene.scale), color="#0f172a")))

        for anchor, filled, outline in ((card.input_anchor, card.input_filled, "#e2e8f0"),
                                        (card.output_anchor, card.output_filled, card.color)):
            sx, sy = _to_screen(scene, anchor)
            r = geometry.SOCKET_RADIUS * scene.scale
            shapes.append(dict(type="circle", x0=sx - r, y0=sy - r, x1=sx + r, y1=sy + r,
                               fillcolor=SELECTED_COLOR if filled else "white", line=dict(color=outline, width=2)))

        if card.annotation:
            annotations.append(dict(x=x0, y=y0 - 10 * scene.scale, text=card.annotation, showarrow=False,
                                    xanchor="left", yanchor="bottom", bgcolor="#fef3c7", bordercolor="#fde68a",
                                    font=dict(size=10, color="#92400e")))

    if scene.marquee is not None:
        left, top, right, bottom = scene.marquee
        shapes.append(dict(type="rect", x0=left, y0=top, x1=right, y1=bottom,
                           line=dict(color="#818cf8", width=2), fillcolor="rgba(224, 231, 255, 0.3)"))

    # invisible markers carry node ids for client side click handling
    fig.add_trace(go.Scatter(
        x=[_to_screen(scene, (c.x + c.width / 2, c.y + c.height / 2))[0] for c in scene.cards],
        y=[_to_screen(scene, (c.x + c.width / 2, c.y + c.height / 2))[1] for c in scene.cards],
        mode="markers",
        marker=dict(size=1, opacity=0),
        customdata=[c.node_id for c in scene.cards],
        text=[c.name for c in scene.cards],
        hoverinfo="text",
        name="Nodes",
    ))

    # shapes and annotations go in with one layout update
    fig.update_layout(
        shapes=shapes,
        annotations=annotations,
        title=f"Zoom: {scene.zoom_percent}%",
        showlegend=False,
        plot_bgcolor=BACKGROUND_COLOR,
        xaxis=dict(visible=False, range=[0, width]),
        yaxis=dict(visible=False, range=[height, 0]),
        width=width,
        height=height,
        margin=dict(l=0, r=0, t=40, b=0),
    )

    return fig


def scene_to_dict(scene: CanvasScene) -> dict:
    """JSON friendly form of the scene"""
    return asdict(scene)


def search_nodes(nodes: Iterable, query: str, limit: int = None) -> List:
    """Case-insensitive substring match on the node name"""
    limit = settings.SEARCH_RESULT_LIMIT if limit is None else limit
    if not query:
        return []
    needle = query.lower()
    return [node for node in nodes if needle in node.name.lower()][:limit]
