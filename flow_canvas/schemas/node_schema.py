from pydantic import BaseModel, Field
from typing import List, Optional

from flow_canvas.schemas.attribute_schema import CustomAttribute, CustomAttributeValue


class NodeTypeConfig(BaseModel):
    id: str
    name: str
    color: str = "#cbd5e1" # hex color for canvas display
    show_hints: bool = True
    show_mechanics: bool = True
    show_rewards: bool = True
    custom_attributes: List[CustomAttribute] = []


class MechanicItem(BaseModel):
    operations: List[str] = []
    functions: List[str] = []


class Mechanics(BaseModel):
    types: List[str] = []
    mechanics_description: Optional[str] = None
    item_details: Optional[MechanicItem] = None


class PuzzleNode(BaseModel):
    id: str
    name: str
    type_id: str
    narrative_context: str = ""
    summary: str = ""
    hints: List[str] = []
    hints_description: Optional[str] = None
    mechanics: Mechanics = Field(default_factory=Mechanics)
    rewards: List[str] = []
    rewards_description: Optional[str] = None
    custom_attribute_values: List[CustomAttributeValue] = []
    ai_generated_content: Optional[str] = None
    user_design_manual: Optional[str] = None
    ui_prototype: Optional[str] = None
    annotation: Optional[str] = None

    def attribute_value(self, attribute_id: str):
        for item in self.custom_attribute_values:
            if item.attribute_id == attribute_id:
                return item.value
        return None


# Fields the quick edit panel is allowed to touch
class NodeQuickEdit(BaseModel):
    name: Optional[str] = None
    hints_description: Optional[str] = None
    mechanics_description: Optional[str] = None
    rewards_description: Optional[str] = None


class NodeCreate(BaseModel):
    type_id: str
