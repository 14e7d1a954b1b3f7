"""Reminder service - Business logic for invoice reminder schedules and settings"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_REMINDER_TIMEZONE
from ...models import User
from ...models_invoice import (
    Invoice,
    InvoiceReminderSchedule,
    InvoiceReminderStep,
    ReminderHistory,
    ReminderSettings,
)
from ...reminders import (
    MINUTES_PER_DAY,
    UnknownPresetError,
    compute_send_at,
    get_preset,
)
from .repository import ReminderRepository
from .schemas import (
    InvoiceRemindersUpdate,
    ReminderSettingsUpdate,
    ReminderStepInput,
)

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "standard"
INDIA_TIMEZONE = "Asia/Kolkata"


def resolve_offset_minutes(step: ReminderStepInput) -> int:
    """Offset from due date: days before/after take precedence over raw minutes"""
    if step.days_before_due:
        return -step.days_before_due * MINUTES_PER_DAY
    if step.days_after_due:
        return step.days_after_due * MINUTES_PER_DAY
    if step.offset_from_due_in_minutes is not None:
        return step.offset_from_due_in_minutes
    return 0


def preset_steps(preset_name: str, template_slug: Optional[str] = None) -> list[ReminderStepInput]:
    """Expand a named preset into step inputs"""
    return [
        ReminderStepInput(
            index=entry["index"],
            days_before_due=entry.get("days_before_due"),
            days_after_due=entry.get("days_after_due"),
            offset_from_due_in_minutes=entry["offset_from_due_in_minutes"],
            template_slug=template_slug,
        )
        for entry in get_preset(preset_name)
    ]


class ReminderService:
    """Service layer for reminder business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReminderRepository()

    def get_owned_invoice(self, invoice_id: int, user: User) -> Invoice:
        """Get an invoice belonging to the user's active workspace"""
        invoice = self.repo.get_invoice(self.db, invoice_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        if user.active_workspace_id != invoice.workspace_id:
            logger.warning(f"⚠️ User {user.id} attempted access to invoice {invoice_id}")
            raise HTTPException(status_code=403, detail="Unauthorized access to invoice")
        return invoice

    def get_invoice_reminders(self, invoice_id: int, user: User) -> tuple[Optional[InvoiceReminderSchedule], bool]:
        invoice = self.get_owned_invoice(invoice_id, user)
        schedule = self.repo.get_schedule(self.db, invoice_id)
        return schedule, bool(invoice.reminders_enabled)

    def update_invoice_reminders(
        self, invoice_id: int, data: InvoiceRemindersUpdate, user: User
    ) -> Optional[InvoiceReminderSchedule]:
        """
        Enable, disable or reconfigure an invoice's reminder schedule.

        Disabling keeps the schedule and its steps but marks it disabled.
        Passing steps replaces every existing step.
        """
        invoice = self.get_owned_invoice(invoice_id, user)

        try:
            invoice.reminders_enabled = data.enabled
            schedule = self.repo.get_schedule(self.db, invoice_id)

            if not data.enabled:
                if schedule:
                    schedule.enabled = False
                self.db.commit()
                logger.info(f"🔕 Reminders disabled for invoice {invoice_id}")
                return schedule

            if schedule is None:
                schedule = InvoiceReminderSchedule(
                    invoice_id=invoice.id,
                    workspace_id=invoice.workspace_id,
                    created_by_user_id=user.id,
                )
                self.db.add(schedule)
            schedule.enabled = True
            schedule.use_defaults = data.use_defaults
            schedule.preset_name = data.preset_name
            self.db.flush()

            steps = data.steps
            if steps is None and data.use_defaults:
                steps = preset_steps(data.preset_name or DEFAULT_PRESET, data.template_slug)

            if steps is not None:
                self._replace_steps(invoice, schedule, steps)

            self.db.commit()
        except UnknownPresetError as e:
            self.db.rollback()
            raise HTTPException(status_code=400, detail=f"Unknown reminder preset: {e.args[0]}") from e
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            logger.error(f"❌ Error updating invoice reminders: {str(e)}")
            self.db.rollback()
            raise HTTPException(status_code=500, detail="Failed to update reminders") from e

        self.db.refresh(schedule)
        logger.info(f"✅ Reminder schedule {schedule.id} saved with {len(schedule.steps)} steps")
        return schedule

    def _replace_steps(
        self, invoice: Invoice, schedule: InvoiceReminderSchedule, steps: list[ReminderStepInput]
    ) -> None:
        if steps and not invoice.due_date:
            raise HTTPException(status_code=400, detail="Cannot enable reminders without a due date")

        self.repo.delete_steps(self.db, schedule)

        for step in steps:
            template_id = step.email_template_id
            if not template_id and step.template_slug:
                template = self.repo.get_template_by_slug(
                    self.db, invoice.workspace_id, step.template_slug
                )
                if template:
                    template_id = template.id

            offset = resolve_offset_minutes(step)
            schedule.steps.append(
                InvoiceReminderStep(
                    index=step.index,
                    days_before_due=step.days_before_due,
                    days_after_due=step.days_after_due,
                    offset_from_due_in_minutes=offset,
                    send_at=compute_send_at(invoice.due_date, offset),
                    email_template_id=template_id,
                    notify_creator=step.notify_creator,
                    status="PENDING",
                )
            )

    def get_settings(self, user: User) -> dict:
        """Stored workspace settings, or defaults when none are saved"""
        workspace_id = self._require_workspace(user)
        settings = self.repo.get_settings(self.db, workspace_id)
        if settings:
            return {"enabled": settings.enabled, "timezone": settings.timezone}

        workspace = self.repo.get_workspace(self.db, workspace_id)
        timezone = (
            INDIA_TIMEZONE
            if workspace and workspace.country == "India"
            else DEFAULT_REMINDER_TIMEZONE
        )
        return {"enabled": True, "timezone": timezone}

    def update_settings(self, data: ReminderSettingsUpdate, user: User) -> dict:
        workspace_id = self._require_workspace(user)
        settings = self.repo.get_settings(self.db, workspace_id)

        if settings is None:
            defaults = self.get_settings(user)
            settings = ReminderSettings(
                workspace_id=workspace_id,
                enabled=defaults["enabled"],
                timezone=defaults["timezone"],
            )
            self.db.add(settings)

        if data.enabled is not None:
            settings.enabled = data.enabled
        if data.timezone is not None:
            settings.timezone = data.timezone

        self.db.commit()
        self.db.refresh(settings)
        logger.info(f"✅ Reminder settings updated for workspace {workspace_id}")
        return {"enabled": settings.enabled, "timezone": settings.timezone}

    def list_history(
        self, user: User, invoice_id: Optional[int] = None, limit: int = 50
    ) -> list[ReminderHistory]:
        workspace_id = self._require_workspace(user)
        if invoice_id is not None:
            self.get_owned_invoice(invoice_id, user)
        return self.repo.list_history(self.db, workspace_id, invoice_id, limit)

    @staticmethod
    def _require_workspace(user: User) -> int:
        if not user.active_workspace_id:
            raise HTTPException(status_code=404, detail="No active workspace")
        return user.active_workspace_id
