from flow_canvas.schemas.attribute_schema import (
    CustomAttribute, CustomAttributeValue, TextValue, NumberValue, ImagesValue, ChoicesValue
)
from flow_canvas.schemas.node_schema import NodeTypeConfig, PuzzleNode, Mechanics, NodeQuickEdit, NodeCreate
from flow_canvas.schemas.edge_schema import Connection, ConnectionLabel
from flow_canvas.schemas.canvas_schema import (
    Position, CanvasState, CanvasStateRead, TransformRead, PointerEventRequest, WheelEventRequest,
    ViewportUpdate, AnnotationUpdate, AttributeValueUpdate
)
from flow_canvas.schemas.project_schema import Project, ProjectCreate, Chapter, ChapterCreate
