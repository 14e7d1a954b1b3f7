"""
Reminder delivery
Sends every due, pending reminder step and records the outcome
Should be run frequently as a scheduled job (cron or ARQ)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ..config import FRONTEND_URL, REMINDER_BATCH_SIZE
from ..email_service import get_sender_email, send_email
from ..email_templates import reminder_email_template
from ..models_invoice import (
    Invoice,
    InvoiceReminderSchedule,
    InvoiceReminderStep,
    ReminderHistory,
)
from ..reminders import TemplateVars, replace_template_variables
from ..utils.sanitization import sanitize_dict

logger = logging.getLogger(__name__)

CLOSED_INVOICE_STATUSES = ("paid", "cancelled")


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how send_at is stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_payment_link(invoice: Invoice) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/pay/{invoice.public_id}"


def build_template_vars(invoice: Invoice) -> TemplateVars:
    """Variables available to reminder copy for one invoice"""
    due_date = invoice.due_date.strftime("%Y-%m-%d") if invoice.due_date else "N/A"
    return {
        "clientName": invoice.client.name,
        "invoiceId": invoice.number,
        "amount": f"{invoice.currency} {invoice.total}",
        "dueDate": due_date,
        "companyName": invoice.workspace.name,
        "paymentLink": build_payment_link(invoice),
    }


def get_due_steps(db: Session, now: datetime, batch_size: int) -> list[InvoiceReminderStep]:
    """Pending steps whose send time has passed on enabled, unpaid invoices"""
    return (
        db.query(InvoiceReminderStep)
        .join(InvoiceReminderSchedule, InvoiceReminderStep.schedule_id == InvoiceReminderSchedule.id)
        .join(Invoice, InvoiceReminderSchedule.invoice_id == Invoice.id)
        .filter(
            InvoiceReminderStep.status == "PENDING",
            InvoiceReminderStep.send_at <= now,
            InvoiceReminderSchedule.enabled.is_(True),
            Invoice.reminders_enabled.is_(True),
            Invoice.status != "paid",
        )
        .order_by(InvoiceReminderStep.send_at.asc())
        .limit(batch_size)
        .all()
    )


def _mark(
    db: Session, step: InvoiceReminderStep, status: str, now: datetime, error: Optional[str] = None
) -> None:
    step.status = status
    step.last_error = error
    step.updated_at = now
    db.commit()


def send_reminder_step(db: Session, step: InvoiceReminderStep, now: datetime) -> dict:
    """Deliver a single step; returns the result entry for the run summary"""
    invoice = step.schedule.invoice
    client = invoice.client
    workspace = invoice.workspace
    template = step.email_template

    if invoice.status in CLOSED_INVOICE_STATUSES:
        _mark(db, step, "SKIPPED", now)
        return {"id": step.id, "status": "SKIPPED", "reason": f"Invoice status is {invoice.status}"}

    if not client.email:
        _mark(db, step, "FAILED", now, "Client has no email")
        return {"id": step.id, "status": "FAILED", "reason": "No client email"}

    if not template:
        _mark(db, step, "FAILED", now, "Template not found")
        return {"id": step.id, "status": "FAILED", "reason": "Template missing"}

    template_vars = build_template_vars(invoice)
    subject = replace_template_variables(template.subject, template_vars)
    # Client-controlled values are escaped before landing in HTML
    html_vars = sanitize_dict(dict(template_vars))
    mjml_content = reminder_email_template(
        subject=replace_template_variables(template.subject, html_vars),
        body=replace_template_variables(template.body, html_vars),
        theme=template.theme,
        brand_color=template.brand_color,
        logo_url=template.logo_url,
        payment_link=template_vars["paymentLink"],
    )

    owner = workspace.owner
    bcc = owner.email if step.notify_creator and owner is not None else None

    try:
        send_email(
            to=client.email,
            subject=subject,
            mjml_content=mjml_content,
            from_address=get_sender_email(workspace),
            bcc=bcc,
        )
    except Exception as e:
        logger.error(f"❌ Failed to send reminder step {step.id}: {str(e)}")
        _mark(db, step, "FAILED", now, str(e))
        return {"id": step.id, "status": "FAILED", "error": str(e)}

    step.status = "SENT"
    step.last_error = None
    step.updated_at = now
    db.add(
        ReminderHistory(
            workspace_id=workspace.id,
            client_id=client.id,
            invoice_id=invoice.id,
            channel="email",
            kind="reminder",
            status="sent",
            sent_at=now,
        )
    )
    db.commit()
    logger.info(f"📧 Reminder step {step.id} sent for invoice {invoice.number}")
    return {"id": step.id, "status": "SENT"}


def process_due_reminders(
    db: Session, now: Optional[datetime] = None, batch_size: int = REMINDER_BATCH_SIZE
) -> dict:
    """
    Send all reminder steps that are due

    Returns:
        dict: {"processed": count, "results": [per-step outcome]}
    """
    now = now or utcnow()

    try:
        steps = get_due_steps(db, now, batch_size)
        logger.info(f"🔍 Found {len(steps)} pending reminders")

        results = [send_reminder_step(db, step, now) for step in steps]

        summary = {"processed": len(results), "results": results}
        if results:
            sent = sum(1 for r in results if r["status"] == "SENT")
            logger.info(f"📊 Reminder run complete: {sent}/{len(results)} sent")
        return summary

    except Exception as e:
        logger.error(f"❌ Error processing reminders: {str(e)}")
        db.rollback()
        raise
