from typing import Optional

from pydantic import BaseModel, Field


# Schema for login
class LoginRequest(BaseModel):
    api_key: str = Field(..., min_length=1, max_length=512)
    redirect: Optional[str] = Field(None, max_length=2000)


class LoginResponse(BaseModel):
    message: str
    redirect: str = "/"


class MessageResponse(BaseModel):
    message: str
