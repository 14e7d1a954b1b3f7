"""Reminder domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...email_templates import THEMES
from ...utils.sanitization import validate_and_sanitize_input


class ReminderStepInput(BaseModel):
    """One step of a custom reminder cadence"""

    index: int
    days_before_due: Optional[int] = Field(default=None, ge=0)
    days_after_due: Optional[int] = Field(default=None, ge=0)
    offset_from_due_in_minutes: Optional[int] = None
    email_template_id: Optional[int] = None
    template_slug: Optional[str] = None
    notify_creator: bool = True


class InvoiceRemindersUpdate(BaseModel):
    enabled: bool
    use_defaults: bool = False
    preset_name: Optional[str] = None
    # Template used for steps generated from a preset
    template_slug: Optional[str] = None
    steps: Optional[list[ReminderStepInput]] = None


class ReminderStepResponse(BaseModel):
    id: int
    index: int
    days_before_due: Optional[int]
    days_after_due: Optional[int]
    offset_from_due_in_minutes: int
    label: str
    send_at: datetime
    email_template_id: Optional[int]
    notify_creator: bool
    status: str
    last_error: Optional[str]

    class Config:
        from_attributes = True


class ReminderScheduleResponse(BaseModel):
    id: int
    invoice_id: int
    enabled: bool
    use_defaults: bool
    preset_name: Optional[str]
    steps: list[ReminderStepResponse] = []

    class Config:
        from_attributes = True


class InvoiceRemindersResponse(BaseModel):
    schedule: Optional[ReminderScheduleResponse]
    reminders_enabled: bool


class ReminderSettingsUpdate(BaseModel):
    enabled: Optional[bool] = None
    timezone: Optional[str] = None


class ReminderSettingsResponse(BaseModel):
    enabled: bool
    timezone: str


class PresetStepResponse(BaseModel):
    index: int
    offset_from_due_in_minutes: int
    label: str


class PresetResponse(BaseModel):
    name: str
    steps: list[PresetStepResponse]


class ReminderPreviewRequest(BaseModel):
    subject: str
    body: str
    theme: Optional[str] = None
    brand_color: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    client_name: str = ""
    invoice_id: str = ""
    amount: str = ""
    due_date: str = ""
    payment_link: Optional[str] = None
    company_name: Optional[str] = None

    @field_validator("subject")
    @classmethod
    def validate_subject(cls, v):
        return validate_and_sanitize_input(v, max_length=500)

    @field_validator("body")
    @classmethod
    def validate_body(cls, v):
        return validate_and_sanitize_input(v, max_length=10000)

    @field_validator("theme")
    @classmethod
    def validate_theme(cls, v):
        if v is not None and v not in THEMES:
            raise ValueError(f"Theme must be one of: {', '.join(THEMES)}")
        return v


class ReminderPreviewResponse(BaseModel):
    subject: str
    body: str
    mjml: str


class ReminderHistoryResponse(BaseModel):
    id: int
    invoice_id: int
    invoice_number: Optional[str]
    client_id: int
    client_name: Optional[str]
    channel: str
    kind: str
    status: str
    sent_at: Optional[datetime]
