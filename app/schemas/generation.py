from pydantic import BaseModel, Field
from typing import Optional


class GenerateRequest(BaseModel):
    prompt: Optional[str] = None
    style: Optional[str] = None
    room_type: Optional[str] = Field(None, alias="roomType")

    class Config:
        populate_by_name = True
