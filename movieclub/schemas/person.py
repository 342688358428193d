import uuid

from pydantic import BaseModel, ConfigDict


class PersonResponse(BaseModel):
    id: uuid.UUID
    code: str
    name: str
    model_config = ConfigDict(from_attributes=True)
