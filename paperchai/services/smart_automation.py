"""
Smart automation for project milestones
Decides whether automated reminders should be skipped after manual actions
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ..config import MANUAL_ACTION_GRACE_DAYS
from ..models_project import Project, ProjectMilestone
from .reminder_worker import utcnow

logger = logging.getLogger(__name__)

CLOSED_MILESTONE_STATUSES = ("PAID", "COMPLETED")

# Status a milestone moves to when the user records each manual action
MANUAL_ACTION_STATUS = {
    "invoice_created": "INVOICED",
    "payment_received": "PAID",
    "marked_complete": "COMPLETED",
    "skip_automation": None,
}


@dataclass
class AutomationCheckResult:
    should_skip: bool
    reason: Optional[str]
    milestone: Optional[dict]


def _summary(milestone: ProjectMilestone) -> dict:
    return {
        "id": milestone.id,
        "title": milestone.title,
        "status": milestone.status,
        "last_manual_action_at": milestone.last_manual_action_at,
    }


def should_skip_milestone_automation(
    db: Session, milestone_id: int, now: Optional[datetime] = None
) -> AutomationCheckResult:
    """
    Check if automation should be skipped for a milestone.

    Skip automation if:
    - auto reminders are disabled or skip_automation is set
    - milestone is already PAID or COMPLETED
    - a manual action was taken within the grace period
    """
    milestone = db.query(ProjectMilestone).filter(ProjectMilestone.id == milestone_id).first()
    if not milestone:
        return AutomationCheckResult(True, "Milestone not found", None)

    summary = _summary(milestone)

    if not milestone.auto_reminders_enabled:
        return AutomationCheckResult(True, "Auto reminders disabled", summary)

    if milestone.skip_automation:
        return AutomationCheckResult(True, "Explicitly skipped by user", summary)

    if milestone.status in CLOSED_MILESTONE_STATUSES:
        return AutomationCheckResult(True, f"Already {milestone.status.lower()}", summary)

    if milestone.last_manual_action_at:
        now = now or utcnow()
        days_since_action = (now - milestone.last_manual_action_at).days
        if days_since_action < MANUAL_ACTION_GRACE_DAYS:
            reason = (
                f'Manual action "{milestone.manual_action_type}" taken {days_since_action} days ago '
                f"(grace period: {MANUAL_ACTION_GRACE_DAYS} days)"
            )
            return AutomationCheckResult(True, reason, summary)

    return AutomationCheckResult(False, None, summary)


def record_milestone_manual_action(
    db: Session,
    milestone_id: int,
    action_type: str,
    invoice_id: Optional[int] = None,
    skip_automation: Optional[bool] = None,
) -> ProjectMilestone:
    """
    Record a manual action on a milestone.

    Call this when the user creates an invoice for the milestone, marks it
    complete or paid, or opts it out of automation.
    """
    if action_type not in MANUAL_ACTION_STATUS:
        raise ValueError(f"Unknown manual action: {action_type}")

    milestone = db.query(ProjectMilestone).filter(ProjectMilestone.id == milestone_id).first()
    if not milestone:
        raise LookupError(f"Milestone not found: {milestone_id}")

    milestone.last_manual_action_at = utcnow()
    milestone.manual_action_type = action_type

    new_status = MANUAL_ACTION_STATUS[action_type]
    if new_status:
        milestone.status = new_status
    if invoice_id is not None:
        milestone.invoice_id = invoice_id
    if skip_automation is None:
        skip_automation = milestone.skip_automation or action_type == "skip_automation"
    milestone.skip_automation = skip_automation

    db.commit()
    db.refresh(milestone)
    logger.info(f"✅ Milestone {milestone.id} manual action recorded: {action_type}")
    return milestone


def get_milestones_for_automation(
    db: Session,
    project_id: Optional[int] = None,
    now: Optional[datetime] = None,
    workspace_id: Optional[int] = None,
) -> list[ProjectMilestone]:
    """Milestones eligible for automated reminders, earliest due first"""
    grace_cutoff = (now or utcnow()) - timedelta(days=MANUAL_ACTION_GRACE_DAYS)

    query = (
        db.query(ProjectMilestone)
        .options(joinedload(ProjectMilestone.project).joinedload(Project.client))
        .filter(
            ProjectMilestone.auto_reminders_enabled.is_(True),
            ProjectMilestone.skip_automation.is_(False),
            ProjectMilestone.status.notin_(CLOSED_MILESTONE_STATUSES),
            or_(
                ProjectMilestone.last_manual_action_at.is_(None),
                ProjectMilestone.last_manual_action_at < grace_cutoff,
            ),
        )
    )
    if project_id is not None:
        query = query.filter(ProjectMilestone.project_id == project_id)
    if workspace_id is not None:
        query = query.join(Project, ProjectMilestone.project_id == Project.id).filter(
            Project.workspace_id == workspace_id
        )

    return query.order_by(ProjectMilestone.due_date.asc()).all()
