"""Email schemas."""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class SendEmailRequest(BaseModel):
    subject: str = Field("", max_length=255)
    message: str = ""
    template: Optional[str] = None
    from_email: Optional[EmailStr] = None
    from_name: Optional[str] = None


class SendEmailResponse(BaseModel):
    message: str = "Email sent successfully"
    message_id: Optional[str] = None


class EmailTemplateInfo(BaseModel):
    id: str
    name: str
    subject: str
