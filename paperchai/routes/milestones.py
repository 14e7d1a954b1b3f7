"""
Milestone Routes - manual actions and automation status for project milestones
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..models_invoice import Invoice
from ..models_project import Project, ProjectMilestone
from ..services.smart_automation import (
    get_milestones_for_automation,
    record_milestone_manual_action,
    should_skip_milestone_automation,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/milestones", tags=["Milestones"])


class ManualActionRequest(BaseModel):
    action_type: str
    invoice_id: Optional[int] = None
    skip_automation: Optional[bool] = None


class MilestoneResponse(BaseModel):
    id: int
    project_id: int
    title: str
    status: str
    due_date: Optional[datetime]
    invoice_id: Optional[int]
    auto_reminders_enabled: bool
    skip_automation: bool
    last_manual_action_at: Optional[datetime]
    manual_action_type: Optional[str]

    class Config:
        from_attributes = True


class AutomationStatusResponse(BaseModel):
    milestone: MilestoneResponse
    should_skip: bool
    reason: Optional[str]


def get_owned_milestone(db: Session, milestone_id: int, user: User) -> ProjectMilestone:
    """Milestone whose project belongs to the user's active workspace"""
    milestone = (
        db.query(ProjectMilestone)
        .join(Project, ProjectMilestone.project_id == Project.id)
        .filter(ProjectMilestone.id == milestone_id)
        .first()
    )
    if not milestone:
        raise HTTPException(status_code=404, detail="Milestone not found")
    if milestone.project.workspace_id != user.active_workspace_id:
        logger.warning(f"⚠️ User {user.id} attempted access to milestone {milestone_id}")
        raise HTTPException(status_code=403, detail="Unauthorized access to milestone")
    return milestone


@router.get("/automation-queue", response_model=list[MilestoneResponse])
async def list_automation_queue(
    project_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Milestones in the active workspace that automated reminders may act on"""
    if not current_user.active_workspace_id:
        raise HTTPException(status_code=404, detail="No active workspace")
    return get_milestones_for_automation(
        db, project_id=project_id, workspace_id=current_user.active_workspace_id
    )


@router.get("/{milestone_id}/automation", response_model=AutomationStatusResponse)
async def get_automation_status(
    milestone_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    milestone = get_owned_milestone(db, milestone_id, current_user)
    result = should_skip_milestone_automation(db, milestone.id)
    return AutomationStatusResponse(
        milestone=MilestoneResponse.model_validate(milestone),
        should_skip=result.should_skip,
        reason=result.reason,
    )


@router.post("/{milestone_id}/manual-action", response_model=MilestoneResponse)
async def record_manual_action(
    milestone_id: int,
    data: ManualActionRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Record a manual action so automation does not duplicate it.

    Actions: invoice_created, payment_received, marked_complete, skip_automation.
    """
    get_owned_milestone(db, milestone_id, current_user)

    if data.invoice_id is not None:
        invoice = db.query(Invoice).filter(Invoice.id == data.invoice_id).first()
        if not invoice or invoice.workspace_id != current_user.active_workspace_id:
            raise HTTPException(status_code=404, detail="Invoice not found")

    try:
        return record_milestone_manual_action(
            db,
            milestone_id,
            data.action_type,
            invoice_id=data.invoice_id,
            skip_automation=data.skip_automation,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
