from pydantic import BaseModel, Field
from typing import List, Optional

from flow_canvas.schemas.canvas_schema import CanvasState
from flow_canvas.schemas.node_schema import NodeTypeConfig, PuzzleNode


class Chapter(BaseModel):
    id: str
    name: str
    description: str = ""
    puzzles: List[PuzzleNode] = []


class Project(BaseModel):
    id: str
    name: str
    background_story: str = ""
    narrative_arc: str = ""
    chapters: List[Chapter] = []
    node_types: List[NodeTypeConfig] = []
    canvas_state: CanvasState = Field(default_factory=CanvasState)


# Data sent by user
class ProjectCreate(BaseModel):
    name: str
    background_story: Optional[str] = ""
    narrative_arc: Optional[str] = ""
    node_types: List[NodeTypeConfig] = []


class ChapterCreate(BaseModel):
    name: str
    description: Optional[str] = ""
