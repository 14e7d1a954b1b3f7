from datetime import datetime, timedelta

import pytest

from paperchai.models import Workspace
from paperchai.models_project import Project, ProjectMilestone
from paperchai.services.smart_automation import (
    get_milestones_for_automation,
    record_milestone_manual_action,
    should_skip_milestone_automation,
)

NOW = datetime(2025, 2, 1, 12, 0)


@pytest.fixture
def project(db, workspace, client_record):
    project = Project(workspace_id=workspace.id, client_id=client_record.id, name="Website rebuild")
    db.add(project)
    db.commit()
    return project


def add_milestone(db, project, title="Phase 1", due_date=datetime(2025, 2, 10), **kwargs):
    milestone = ProjectMilestone(project_id=project.id, title=title, due_date=due_date, **kwargs)
    db.add(milestone)
    db.commit()
    return milestone


def test_missing_milestone_is_skipped(db):
    result = should_skip_milestone_automation(db, 404, now=NOW)
    assert result.should_skip is True
    assert result.reason == "Milestone not found"
    assert result.milestone is None


@pytest.mark.parametrize(
    "fields, reason",
    [
        ({"auto_reminders_enabled": False}, "Auto reminders disabled"),
        ({"skip_automation": True}, "Explicitly skipped by user"),
        ({"status": "PAID"}, "Already paid"),
        ({"status": "COMPLETED"}, "Already completed"),
    ],
)
def test_skip_reasons(db, project, fields, reason):
    milestone = add_milestone(db, project, **fields)
    result = should_skip_milestone_automation(db, milestone.id, now=NOW)
    assert result.should_skip is True
    assert result.reason == reason
    assert result.milestone["id"] == milestone.id


def test_recent_manual_action_is_within_grace_period(db, project):
    milestone = add_milestone(
        db,
        project,
        last_manual_action_at=NOW - timedelta(days=3, hours=2),
        manual_action_type="invoice_created",
    )

    result = should_skip_milestone_automation(db, milestone.id, now=NOW)

    assert result.should_skip is True
    assert result.reason == 'Manual action "invoice_created" taken 3 days ago (grace period: 7 days)'


def test_old_manual_action_does_not_block(db, project):
    milestone = add_milestone(db, project, last_manual_action_at=NOW - timedelta(days=8))
    result = should_skip_milestone_automation(db, milestone.id, now=NOW)
    assert result.should_skip is False
    assert result.reason is None


@pytest.mark.parametrize(
    "action, status",
    [
        ("invoice_created", "INVOICED"),
        ("payment_received", "PAID"),
        ("marked_complete", "COMPLETED"),
        ("skip_automation", "PENDING"),
    ],
)
def test_record_manual_action_updates_status(db, project, action, status):
    milestone = add_milestone(db, project)

    updated = record_milestone_manual_action(db, milestone.id, action, invoice_id=None)

    assert updated.status == status
    assert updated.manual_action_type == action
    assert updated.last_manual_action_at is not None


def test_record_manual_action_sets_invoice_and_skip_flag(db, project, invoice):
    milestone = add_milestone(db, project)

    updated = record_milestone_manual_action(
        db, milestone.id, "skip_automation", invoice_id=invoice.id, skip_automation=True
    )

    assert updated.invoice_id == invoice.id
    assert updated.skip_automation is True


def test_record_manual_action_rejects_unknown_action(db, project):
    milestone = add_milestone(db, project)
    with pytest.raises(ValueError):
        record_milestone_manual_action(db, milestone.id, "archived")


def test_record_manual_action_missing_milestone(db):
    with pytest.raises(LookupError):
        record_milestone_manual_action(db, 404, "marked_complete")


def test_milestones_for_automation(db, project, workspace):
    later = add_milestone(db, project, title="Later", due_date=datetime(2025, 3, 1))
    sooner = add_milestone(db, project, title="Sooner", due_date=datetime(2025, 2, 5))
    add_milestone(db, project, title="Paid", status="PAID")
    add_milestone(db, project, title="Skipped", skip_automation=True)
    add_milestone(db, project, title="Off", auto_reminders_enabled=False)
    add_milestone(db, project, title="Recent", last_manual_action_at=NOW - timedelta(days=1))
    stale = add_milestone(
        db, project, title="Stale", due_date=datetime(2025, 2, 20), last_manual_action_at=NOW - timedelta(days=30)
    )

    other = Project(workspace_id=workspace.id, name="Other")
    db.add(other)
    db.commit()
    add_milestone(db, other, title="Elsewhere")

    milestones = get_milestones_for_automation(db, project_id=project.id, now=NOW)

    assert [m.id for m in milestones] == [sooner.id, stale.id, later.id]
    assert milestones[0].project.client.name == "Acme"
    assert len(get_milestones_for_automation(db, now=NOW)) == 4


def test_skip_automation_action_sets_flag_by_default(db, project):
    milestone = add_milestone(db, project)

    updated = record_milestone_manual_action(db, milestone.id, "skip_automation")

    assert updated.skip_automation is True
    assert should_skip_milestone_automation(db, milestone.id).reason == "Explicitly skipped by user"


def test_other_actions_keep_skip_flag(db, project):
    milestone = add_milestone(db, project)
    assert record_milestone_manual_action(db, milestone.id, "invoice_created").skip_automation is False


def test_milestones_for_automation_scoped_to_workspace(db, project):
    mine = add_milestone(db, project, title="Mine")
    other_ws = Workspace(name="Elsewhere Ltd")
    db.add(other_ws)
    db.commit()
    foreign = Project(workspace_id=other_ws.id, name="Foreign")
    db.add(foreign)
    db.commit()
    add_milestone(db, foreign, title="Theirs")

    milestones = get_milestones_for_automation(db, now=NOW, workspace_id=project.workspace_id)

    assert [m.id for m in milestones] == [mine.id]
