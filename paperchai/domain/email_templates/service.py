"""Email template service - Business logic for workspace reminder templates"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_templates import DEFAULT_BRAND_COLOR, DEFAULT_THEME
from ...models import User
from ...models_invoice import EmailTemplate
from .repository import EmailTemplateRepository
from .schemas import EmailTemplateUpsert

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("slug", "name", "subject", "body")


class EmailTemplateService:
    """Service layer for email template business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EmailTemplateRepository()

    def list_templates(self, user: User) -> list[EmailTemplate]:
        workspace_id = self._require_workspace(user)
        return self.repo.list_by_workspace(self.db, workspace_id)

    def upsert_template(self, data: EmailTemplateUpsert, user: User) -> EmailTemplate:
        """
        Create a template, or update the one with the same slug in the
        user's active workspace. Theme and brand colour fall back to defaults.
        """
        workspace_id = self._require_workspace(user)

        if not all(getattr(data, field) for field in REQUIRED_FIELDS):
            raise HTTPException(
                status_code=400, detail="Missing required fields: slug, name, subject, body"
            )

        template = self.repo.get_by_slug(self.db, workspace_id, data.slug)
        created = template is None
        if created:
            template = EmailTemplate(workspace_id=workspace_id, slug=data.slug)
            self.db.add(template)

        template.name = data.name
        template.description = data.description
        template.subject = data.subject
        template.body = data.body
        template.theme = data.theme or DEFAULT_THEME
        template.brand_color = data.brand_color or DEFAULT_BRAND_COLOR
        template.logo_url = data.logo_url

        try:
            self.db.commit()
        except Exception as e:
            logger.error(f"❌ Error saving email template: {str(e)}")
            self.db.rollback()
            raise HTTPException(status_code=500, detail="Failed to save template") from e

        self.db.refresh(template)
        action = "created" if created else "updated"
        logger.info(f"✅ Email template '{template.slug}' {action} in workspace {workspace_id}")
        return template

    def delete_template(self, template_id: int, user: User) -> dict:
        """Delete a template owned by the user's active workspace"""
        workspace_id = self._require_workspace(user)

        template = self.repo.get_by_id(self.db, template_id)
        if not template:
            raise HTTPException(status_code=404, detail="Template not found")
        if template.workspace_id != workspace_id:
            logger.warning(f"⚠️ User {user.id} attempted to delete template {template_id}")
            raise HTTPException(status_code=403, detail="Unauthorized access to template")

        detached = self.repo.detach_from_steps(self.db, template_id)
        self.repo.delete(self.db, template)
        self.db.commit()
        logger.info(f"🗑️ Email template {template_id} deleted ({detached} reminder steps detached)")
        return {"message": "Template deleted"}

    @staticmethod
    def _require_workspace(user: User) -> int:
        if not user.active_workspace_id:
            raise HTTPException(status_code=404, detail="No active workspace")
        return user.active_workspace_id
