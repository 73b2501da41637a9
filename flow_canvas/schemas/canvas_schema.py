from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from flow_canvas.schemas.edge_schema import Connection


class Position(BaseModel):
    x: float
    y: float


class CanvasState(BaseModel):
    """Layout and connections, persisted together"""
    positions: Dict[str, Position] = {}
    connections: List[Connection] = []


class PointerEventRequest(BaseModel):
    x: float # canvas-local screen coordinates
    y: float
    button: int = 0 # 0 primary, 1 middle (pan), 2 secondary


class WheelEventRequest(BaseModel):
    x: float
    y: float
    delta_y: float


MAX_VIEWPORT_SIZE = 10000 # screen px


class ViewportUpdate(BaseModel):
    width: float = Field(gt=0, le=MAX_VIEWPORT_SIZE)
    height: float = Field(gt=0, le=MAX_VIEWPORT_SIZE)


class AnnotationUpdate(BaseModel):
    annotation: str = ""


class AttributeValueUpdate(BaseModel):
    """Raw input from the quick edit panel, interpreted by the attribute's declared type"""
    text: Optional[str] = None
    number: Optional[float] = None
    image: Optional[str] = None # appended to the image list
    option: Optional[str] = None # toggled in the select list


class TransformRead(BaseModel):
    pan_x: float
    pan_y: float
    scale: float
    zoom_percent: int


class CanvasStateRead(CanvasState):
    transform: TransformRead
    mode: str
    selected: List[str]
    collapsed: List[str]
