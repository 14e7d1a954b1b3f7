"""Reminder repository - Database operations for reminder schedules and settings"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Workspace
from ...models_invoice import (
    EmailTemplate,
    Invoice,
    InvoiceReminderSchedule,
    ReminderHistory,
    ReminderSettings,
)


class ReminderRepository:
    """Repository for reminder database operations"""

    @staticmethod
    def get_invoice(db: Session, invoice_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id).first()

    @staticmethod
    def get_schedule(db: Session, invoice_id: int) -> Optional[InvoiceReminderSchedule]:
        """Get an invoice's schedule with its steps ordered by index"""
        return (
            db.query(InvoiceReminderSchedule)
            .options(joinedload(InvoiceReminderSchedule.steps))
            .filter(InvoiceReminderSchedule.invoice_id == invoice_id)
            .first()
        )

    @staticmethod
    def get_template_by_slug(db: Session, workspace_id: int, slug: str) -> Optional[EmailTemplate]:
        return (
            db.query(EmailTemplate)
            .filter(EmailTemplate.workspace_id == workspace_id, EmailTemplate.slug == slug)
            .first()
        )

    @staticmethod
    def delete_steps(db: Session, schedule: InvoiceReminderSchedule) -> None:
        """Remove every step; steps are delete-orphan children of the schedule"""
        schedule.steps.clear()
        db.flush()

    @staticmethod
    def get_workspace(db: Session, workspace_id: int) -> Optional[Workspace]:
        return db.query(Workspace).filter(Workspace.id == workspace_id).first()

    @staticmethod
    def get_settings(db: Session, workspace_id: int) -> Optional[ReminderSettings]:
        return (
            db.query(ReminderSettings).filter(ReminderSettings.workspace_id == workspace_id).first()
        )

    @staticmethod
    def list_history(
        db: Session, workspace_id: int, invoice_id: Optional[int] = None, limit: int = 50
    ) -> list[ReminderHistory]:
        """Delivered reminders for a workspace, most recent first"""
        query = (
            db.query(ReminderHistory)
            .options(joinedload(ReminderHistory.invoice), joinedload(ReminderHistory.client))
            .filter(ReminderHistory.workspace_id == workspace_id)
        )
        if invoice_id is not None:
            query = query.filter(ReminderHistory.invoice_id == invoice_id)
        return (
            query.order_by(ReminderHistory.sent_at.desc(), ReminderHistory.id.desc())
            .limit(limit)
            .all()
        )
