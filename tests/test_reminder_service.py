from datetime import datetime

import pytest
from fastapi import HTTPException

from paperchai.domain.reminders.schemas import (
    InvoiceRemindersUpdate,
    ReminderSettingsUpdate,
    ReminderStepInput,
)
from paperchai.domain.reminders.service import ReminderService, resolve_offset_minutes
from paperchai.models import User, Workspace
from paperchai.models_invoice import InvoiceReminderStep


@pytest.mark.parametrize(
    "step, expected",
    [
        (ReminderStepInput(index=0, days_before_due=3), -4320),
        (ReminderStepInput(index=0, days_after_due=7), 10080),
        (ReminderStepInput(index=0, offset_from_due_in_minutes=90), 90),
        (ReminderStepInput(index=0, days_before_due=2, offset_from_due_in_minutes=5), -2880),
        (ReminderStepInput(index=0, days_after_due=0), 0),
        (ReminderStepInput(index=0), 0),
    ],
)
def test_resolve_offset_minutes(step, expected):
    assert resolve_offset_minutes(step) == expected


def test_custom_steps_are_scheduled_from_due_date(db, owner, invoice, email_template):
    service = ReminderService(db)
    payload = InvoiceRemindersUpdate(
        enabled=True,
        steps=[
            ReminderStepInput(index=1, days_after_due=2, template_slug="gentle-nudge"),
            ReminderStepInput(index=0, days_before_due=1, email_template_id=email_template.id, notify_creator=False),
        ],
    )

    schedule = service.update_invoice_reminders(invoice.id, payload, owner)

    assert schedule.enabled is True
    assert invoice.reminders_enabled is True
    steps = sorted(schedule.steps, key=lambda s: s.index)
    assert [s.send_at for s in steps] == [datetime(2025, 1, 9, 9, 0), datetime(2025, 1, 12, 9, 0)]
    assert [s.offset_from_due_in_minutes for s in steps] == [-1440, 2880]
    assert all(s.email_template_id == email_template.id for s in steps)
    assert [s.notify_creator for s in steps] == [False, True]
    assert all(s.status == "PENDING" for s in steps)


def test_use_defaults_generates_standard_preset(db, owner, invoice, email_template):
    service = ReminderService(db)
    schedule = service.update_invoice_reminders(
        invoice.id,
        InvoiceRemindersUpdate(enabled=True, use_defaults=True, template_slug="gentle-nudge"),
        owner,
    )

    offsets = [s.offset_from_due_in_minutes for s in sorted(schedule.steps, key=lambda s: s.index)]
    assert offsets == [-4320, 0, 10080]
    assert schedule.use_defaults is True


def test_unknown_preset_is_rejected(db, owner, invoice):
    with pytest.raises(HTTPException) as exc:
        ReminderService(db).update_invoice_reminders(
            invoice.id, InvoiceRemindersUpdate(enabled=True, use_defaults=True, preset_name="nope"), owner
        )
    assert exc.value.status_code == 400


def test_replacing_steps_removes_old_ones(db, owner, invoice):
    service = ReminderService(db)
    service.update_invoice_reminders(invoice.id, InvoiceRemindersUpdate(enabled=True, use_defaults=True), owner)
    schedule = service.update_invoice_reminders(
        invoice.id,
        InvoiceRemindersUpdate(enabled=True, steps=[ReminderStepInput(index=0, days_after_due=1)]),
        owner,
    )

    assert len(schedule.steps) == 1
    assert db.query(InvoiceReminderStep).count() == 1


def test_disable_keeps_schedule_and_steps(db, owner, invoice):
    service = ReminderService(db)
    service.update_invoice_reminders(invoice.id, InvoiceRemindersUpdate(enabled=True, use_defaults=True), owner)

    schedule = service.update_invoice_reminders(invoice.id, InvoiceRemindersUpdate(enabled=False), owner)

    assert schedule.enabled is False
    assert invoice.reminders_enabled is False
    assert db.query(InvoiceReminderStep).count() == 3


def test_disable_without_schedule_returns_none(db, owner, invoice):
    assert ReminderService(db).update_invoice_reminders(
        invoice.id, InvoiceRemindersUpdate(enabled=False), owner
    ) is None


def test_enabling_steps_without_due_date_fails(db, owner, invoice):
    invoice.due_date = None
    db.commit()

    with pytest.raises(HTTPException) as exc:
        ReminderService(db).update_invoice_reminders(
            invoice.id, InvoiceRemindersUpdate(enabled=True, use_defaults=True), owner
        )

    assert exc.value.status_code == 400
    db.refresh(invoice)
    assert invoice.reminders_enabled is False


def test_missing_invoice(db, owner, workspace):
    with pytest.raises(HTTPException) as exc:
        ReminderService(db).get_invoice_reminders(999, owner)
    assert exc.value.status_code == 404


def test_other_workspace_is_forbidden(db, invoice):
    other_ws = Workspace(name="Other")
    db.add(other_ws)
    db.commit()
    stranger = User(email="someone@else.test", active_workspace_id=other_ws.id)
    db.add(stranger)
    db.commit()

    with pytest.raises(HTTPException) as exc:
        ReminderService(db).get_invoice_reminders(invoice.id, stranger)
    assert exc.value.status_code == 403


def test_settings_default_timezone_for_india(db, owner, workspace):
    assert ReminderService(db).get_settings(owner) == {"enabled": True, "timezone": "Asia/Kolkata"}


def test_settings_default_timezone_elsewhere(db, owner, workspace):
    workspace.country = "Germany"
    db.commit()
    assert ReminderService(db).get_settings(owner) == {"enabled": True, "timezone": "UTC"}


def test_settings_upsert(db, owner, workspace):
    service = ReminderService(db)
    assert service.update_settings(ReminderSettingsUpdate(enabled=False), owner) == {
        "enabled": False,
        "timezone": "Asia/Kolkata",
    }
    assert service.update_settings(ReminderSettingsUpdate(timezone="Europe/Berlin"), owner) == {
        "enabled": False,
        "timezone": "Europe/Berlin",
    }
    assert service.get_settings(owner)["timezone"] == "Europe/Berlin"


def test_settings_require_active_workspace(db):
    user = User(email="new@user.test")
    db.add(user)
    db.commit()
    with pytest.raises(HTTPException) as exc:
        ReminderService(db).get_settings(user)
    assert exc.value.status_code == 404
