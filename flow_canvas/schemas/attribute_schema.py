from pydantic import BaseModel, Field, field_validator
from typing import Annotated, List, Literal, Optional, Union


AttributeType = Literal["text", "number", "image", "select"]


class CustomAttribute(BaseModel):
    id: str
    name: str
    type: AttributeType
    options: Optional[List[str]] = None # used for 'select' type


# Values are tagged by the declared type of the owning attribute
class TextValue(BaseModel):
    kind: Literal["text"] = "text"
    text: str = ""


class NumberValue(BaseModel):
    kind: Literal["number"] = "number"
    number: float = 0.0


class ImagesValue(BaseModel):
    kind: Literal["image"] = "image"
    images: List[str] = [] # data urls or links


class ChoicesValue(BaseModel):
    kind: Literal["select"] = "select"
    choices: List[str] = []

    @field_validator("choices")
    @classmethod
    def unique_choices(cls, value):
        """Keep first occurrence of each option, choices behave like a set"""
        return list(dict.fromkeys(value))


AttributeValue = Annotated[
    Union[TextValue, NumberValue, ImagesValue, ChoicesValue],
    Field(discriminator="kind"),
]


class CustomAttributeValue(BaseModel):
    attribute_id: str
    value: AttributeValue


def empty_value(attribute_type: str):
    """Default value for an attribute that has not been filled in yet"""
    if attribute_type == "number":
        return NumberValue()
    if attribute_type == "image":
        return ImagesValue()
    if attribute_type == "select":
        return ChoicesValue()
    return TextValue()


def format_attribute_value(value) -> str:
    """Short preview text of a value for the expanded node card"""
    if isinstance(value, TextValue):
        return value.text
    if isinstance(value, NumberValue):
        return f"{value.number:g}"
    if isinstance(value, ImagesValue):
        return f"{len(value.images)} image(s)" if value.images else ""
    if isinstance(value, ChoicesValue):
        return ", ".join(value.choices)
    return ""
