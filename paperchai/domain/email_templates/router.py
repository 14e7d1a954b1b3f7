"""Email template router - FastAPI endpoints for workspace reminder templates"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import EmailTemplateResponse, EmailTemplateUpsert
from .service import EmailTemplateService

router = APIRouter(prefix="/email-templates", tags=["Email Templates"])


def get_email_template_service(db: Session = Depends(get_db)) -> EmailTemplateService:
    """Dependency injection for EmailTemplateService"""
    return EmailTemplateService(db)


@router.get("", response_model=list[EmailTemplateResponse])
async def list_email_templates(
    current_user: User = Depends(get_current_user),
    service: EmailTemplateService = Depends(get_email_template_service),
):
    """List templates in the active workspace, newest first"""
    return service.list_templates(current_user)


@router.post("", response_model=EmailTemplateResponse)
async def save_email_template(
    data: EmailTemplateUpsert,
    current_user: User = Depends(get_current_user),
    service: EmailTemplateService = Depends(get_email_template_service),
):
    """Create a template or update the one with the same slug"""
    return service.upsert_template(data, current_user)


@router.delete("/{template_id}")
async def delete_email_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    service: EmailTemplateService = Depends(get_email_template_service),
):
    """Delete a template; reminder steps using it lose their template"""
    return service.delete_template(template_id, current_user)
