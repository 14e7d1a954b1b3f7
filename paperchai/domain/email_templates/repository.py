"""Email template repository - Database operations for workspace templates"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_invoice import EmailTemplate, InvoiceReminderStep


class EmailTemplateRepository:
    """Repository for email template database operations"""

    @staticmethod
    def list_by_workspace(db: Session, workspace_id: int) -> list[EmailTemplate]:
        """Newest templates first"""
        return (
            db.query(EmailTemplate)
            .filter(EmailTemplate.workspace_id == workspace_id)
            .order_by(EmailTemplate.created_at.desc(), EmailTemplate.id.desc())
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, template_id: int) -> Optional[EmailTemplate]:
        return db.query(EmailTemplate).filter(EmailTemplate.id == template_id).first()

    @staticmethod
    def get_by_slug(db: Session, workspace_id: int, slug: str) -> Optional[EmailTemplate]:
        return (
            db.query(EmailTemplate)
            .filter(EmailTemplate.workspace_id == workspace_id, EmailTemplate.slug == slug)
            .first()
        )

    @staticmethod
    def detach_from_steps(db: Session, template_id: int) -> int:
        """Clear the template from reminder steps still pointing at it"""
        return (
            db.query(InvoiceReminderStep)
            .filter(InvoiceReminderStep.email_template_id == template_id)
            .update({InvoiceReminderStep.email_template_id: None}, synchronize_session="fetch")
        )

    @staticmethod
    def delete(db: Session, template: EmailTemplate) -> None:
        db.delete(template)
