"""
Invoice, Email Template and Reminder Models
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Invoice(Base):
    """Invoice model for client billing"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    # Public UUID used in payment links (prevents enumeration)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)

    number = Column(String(50), nullable=False, index=True)
    status = Column(String(50), default="draft")  # draft, sent, paid, overdue, cancelled
    currency = Column(String(10), default="INR")

    # Line items as [{title, description, quantity, unit_price, tax_rate, total}]
    items = Column(JSON, default=list)
    subtotal = Column(Float, default=0)
    tax_total = Column(Float, default=0)
    total = Column(Float, nullable=False, default=0)

    issue_date = Column(DateTime, server_default=func.now())
    due_date = Column(DateTime, nullable=True)

    reminders_enabled = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    workspace = relationship("Workspace", back_populates="invoices")
    client = relationship("Client", back_populates="invoices")
    reminder_schedule = relationship(
        "InvoiceReminderSchedule", back_populates="invoice", uselist=False
    )


class EmailTemplate(Base):
    """Workspace-owned reminder copy with {{placeholder}} variables"""

    __tablename__ = "email_templates"
    __table_args__ = (UniqueConstraint("workspace_id", "slug", name="uq_email_template_slug"),)

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    slug = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    subject = Column(String(500), nullable=False)
    body = Column(Text, nullable=False)
    theme = Column(String(20), default="modern")  # minimal, classic, modern, noir
    brand_color = Column(String(7), nullable=True)  # e.g., #RRGGBB
    logo_url = Column(String(500), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class InvoiceReminderSchedule(Base):
    """Per-invoice reminder cadence"""

    __tablename__ = "invoice_reminder_schedules"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), unique=True, nullable=False)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    enabled = Column(Boolean, default=True, nullable=False)
    use_defaults = Column(Boolean, default=False, nullable=False)
    preset_name = Column(String(50), nullable=True)
    created_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    invoice = relationship("Invoice", back_populates="reminder_schedule")
    steps = relationship(
        "InvoiceReminderStep",
        back_populates="schedule",
        order_by="InvoiceReminderStep.index",
        cascade="all, delete-orphan",
    )


class InvoiceReminderStep(Base):
    """A single scheduled send within a reminder schedule"""

    __tablename__ = "invoice_reminder_steps"

    id = Column(Integer, primary_key=True, index=True)
    schedule_id = Column(
        Integer, ForeignKey("invoice_reminder_schedules.id"), nullable=False, index=True
    )
    index = Column(Integer, nullable=False)
    days_before_due = Column(Integer, nullable=True)
    days_after_due = Column(Integer, nullable=True)
    offset_from_due_in_minutes = Column(Integer, nullable=False, default=0)
    send_at = Column(DateTime, nullable=False, index=True)
    email_template_id = Column(Integer, ForeignKey("email_templates.id"), nullable=True)
    notify_creator = Column(Boolean, default=True, nullable=False)  # BCC the workspace owner
    status = Column(String(20), default="PENDING", index=True)  # PENDING, SENT, SKIPPED, FAILED
    last_error = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    schedule = relationship("InvoiceReminderSchedule", back_populates="steps")
    email_template = relationship("EmailTemplate")


class ReminderHistory(Base):
    """Log of reminders actually delivered"""

    __tablename__ = "reminder_history"

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False)
    channel = Column(String(20), default="email")
    kind = Column(String(20), default="reminder")
    status = Column(String(20), default="sent")
    sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    invoice = relationship("Invoice")
    client = relationship("Client")


class ReminderSettings(Base):
    """Workspace-wide reminder preferences"""

    __tablename__ = "reminder_settings"

    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), unique=True, nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    timezone = Column(String(64), default="UTC")

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
