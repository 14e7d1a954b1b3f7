"""Email template domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...email_templates import THEMES
from ...utils.sanitization import validate_and_sanitize_input


class EmailTemplateUpsert(BaseModel):
    """Create or update a template; slug is the key within a workspace"""

    # Required fields are checked by the service so the API can answer 400
    slug: Optional[str] = None
    name: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    description: Optional[str] = None
    theme: Optional[str] = None
    brand_color: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    logo_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        if v is None:
            return v
        return validate_and_sanitize_input(v.strip().lower(), max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_and_sanitize_input(v, max_length=255) if v is not None else v

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v):
        return validate_and_sanitize_input(v, max_length=500) if v is not None else v

    @field_validator("body")
    @classmethod
    def validate_body(cls, v):
        return validate_and_sanitize_input(v, max_length=10000) if v is not None else v

    @field_validator("theme")
    @classmethod
    def validate_theme(cls, v):
        if v and v not in THEMES:
            raise ValueError(f"Theme must be one of: {', '.join(THEMES)}")
        return v


class EmailTemplateResponse(BaseModel):
    id: int
    workspace_id: int
    slug: str
    name: str
    description: Optional[str]
    subject: str
    body: str
    theme: str
    brand_color: Optional[str]
    logo_url: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
