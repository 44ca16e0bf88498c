from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class EmailConfigUpdate(BaseModel):
    host: str = Field(..., min_length=1)
    port: int = Field(..., gt=0, le=65535)
    user: str = Field(..., min_length=1)
    password: Optional[str] = None  # keep the current password when omitted
    use_ssl: bool = True
    sender_name: Optional[str] = None


class EmailConfig(BaseModel):
    host: str
    port: int
    user: Optional[str] = None
    password: Optional[str] = None  # always masked
    use_ssl: bool
    sender_name: Optional[str] = None
    configured: bool


class EmailTestRequest(BaseModel):
    email: EmailStr


class MessageResponse(BaseModel):
    message: str
