from pydantic import BaseModel, Field
from typing import Optional


# Fields are optional so that missing values are reported with the API's own messages
class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SettingsUpdate(BaseModel):
    language: Optional[str] = None
    theme: Optional[str] = None


class WatermarkUpdate(BaseModel):
    enabled: Optional[bool] = None
    type: Optional[str] = None
    logo_url: Optional[str] = Field(None, alias="logoUrl")
    text: Optional[str] = None
    language: Optional[str] = None
    position: Optional[str] = None
    opacity: Optional[int] = None

    class Config:
        populate_by_name = True
