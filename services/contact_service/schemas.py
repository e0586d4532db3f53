from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class ContactRequest(BaseModel):
    firstName: str = Field(min_length=1, max_length=255)
    lastName: str = Field(default="", max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=64)
    subject: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1, max_length=10000)


class ContactResponse(BaseModel):
    message: str
