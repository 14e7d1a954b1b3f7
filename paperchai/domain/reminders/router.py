"""Reminder router - FastAPI endpoints for reminder schedules, settings and previews"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...email_templates import reminder_email_template
from ...models import User
from ...models_invoice import InvoiceReminderSchedule
from ...reminders import REMINDER_PRESETS, describe_preset, get_offset_label, replace_template_variables
from .schemas import (
    InvoiceRemindersResponse,
    InvoiceRemindersUpdate,
    PresetResponse,
    ReminderHistoryResponse,
    ReminderPreviewRequest,
    ReminderPreviewResponse,
    ReminderScheduleResponse,
    ReminderSettingsResponse,
    ReminderSettingsUpdate,
    ReminderStepResponse,
)
from .service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reminders"])


def get_reminder_service(db: Session = Depends(get_db)) -> ReminderService:
    """Dependency injection for ReminderService"""
    return ReminderService(db)


def serialize_schedule(schedule: Optional[InvoiceReminderSchedule]) -> Optional[ReminderScheduleResponse]:
    if schedule is None:
        return None
    return ReminderScheduleResponse(
        id=schedule.id,
        invoice_id=schedule.invoice_id,
        enabled=schedule.enabled,
        use_defaults=schedule.use_defaults,
        preset_name=schedule.preset_name,
        steps=[
            ReminderStepResponse(
                id=s.id,
                index=s.index,
                days_before_due=s.days_before_due,
                days_after_due=s.days_after_due,
                offset_from_due_in_minutes=s.offset_from_due_in_minutes,
                label=get_offset_label(s.offset_from_due_in_minutes),
                send_at=s.send_at,
                email_template_id=s.email_template_id,
                notify_creator=s.notify_creator,
                status=s.status,
                last_error=s.last_error,
            )
            for s in sorted(schedule.steps, key=lambda s: s.index)
        ],
    )


# ============================================================================
# INVOICE SCHEDULES
# ============================================================================


@router.get("/invoices/{invoice_id}/reminders", response_model=InvoiceRemindersResponse)
async def get_invoice_reminders(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: ReminderService = Depends(get_reminder_service),
):
    """Get an invoice's reminder schedule with steps in send order"""
    schedule, enabled = service.get_invoice_reminders(invoice_id, current_user)
    return InvoiceRemindersResponse(schedule=serialize_schedule(schedule), reminders_enabled=enabled)


@router.post("/invoices/{invoice_id}/reminders", response_model=InvoiceRemindersResponse)
async def update_invoice_reminders(
    invoice_id: int,
    data: InvoiceRemindersUpdate,
    current_user: User = Depends(get_current_user),
    service: ReminderService = Depends(get_reminder_service),
):
    """Enable, disable or replace an invoice's reminder steps"""
    schedule = service.update_invoice_reminders(invoice_id, data, current_user)
    return InvoiceRemindersResponse(schedule=serialize_schedule(schedule), reminders_enabled=data.enabled)


# ============================================================================
# WORKSPACE SETTINGS
# ============================================================================


@router.get("/reminders/settings", response_model=ReminderSettingsResponse)
async def get_reminder_settings(
    current_user: User = Depends(get_current_user),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.get_settings(current_user)


@router.post("/reminders/settings", response_model=ReminderSettingsResponse)
async def update_reminder_settings(
    data: ReminderSettingsUpdate,
    current_user: User = Depends(get_current_user),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.update_settings(data, current_user)


# ============================================================================
# DELIVERY HISTORY
# ============================================================================


@router.get("/reminders/history", response_model=list[ReminderHistoryResponse])
async def list_reminder_history(
    invoice_id: Optional[int] = None,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    service: ReminderService = Depends(get_reminder_service),
):
    """Reminders delivered in the active workspace, most recent first"""
    return [
        ReminderHistoryResponse(
            id=h.id,
            invoice_id=h.invoice_id,
            invoice_number=h.invoice.number if h.invoice else None,
            client_id=h.client_id,
            client_name=h.client.name if h.client else None,
            channel=h.channel,
            kind=h.kind,
            status=h.status,
            sent_at=h.sent_at,
        )
        for h in service.list_history(current_user, invoice_id, limit)
    ]


# ============================================================================
# PRESETS & PREVIEW
# ============================================================================


@router.get("/reminders/presets", response_model=list[PresetResponse])
async def list_presets(current_user: User = Depends(get_current_user)):
    """Available reminder cadences with readable offset labels"""
    return [
        PresetResponse(
            name=name,
            steps=[
                {
                    "index": step["index"],
                    "offset_from_due_in_minutes": step["offset_from_due_in_minutes"],
                    "label": step["label"],
                }
                for step in describe_preset(name)
            ],
        )
        for name in REMINDER_PRESETS
    ]


@router.post("/reminders/preview", response_model=ReminderPreviewResponse)
async def preview_reminder(
    data: ReminderPreviewRequest,
    current_user: User = Depends(get_current_user),
):
    """Render reminder copy with sample values, without sending anything"""
    template_vars = {
        "clientName": data.client_name,
        "invoiceId": data.invoice_id,
        "amount": data.amount,
        "dueDate": data.due_date,
    }
    if data.payment_link:
        template_vars["paymentLink"] = data.payment_link
    if data.company_name:
        template_vars["companyName"] = data.company_name

    subject = replace_template_variables(data.subject, template_vars)
    body = replace_template_variables(data.body, template_vars)
    mjml = reminder_email_template(
        subject=subject,
        body=body,
        theme=data.theme,
        brand_color=data.brand_color,
        payment_link=data.payment_link,
    )
    return ReminderPreviewResponse(subject=subject, body=body, mjml=mjml)
