from pydantic import BaseModel


class Connection(BaseModel):
    id: str
    source_id: str
    target_id: str
    label: str = ""


class ConnectionLabel(BaseModel):
    label: str
