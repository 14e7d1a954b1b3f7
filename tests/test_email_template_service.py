from datetime import datetime

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from paperchai.domain.email_templates.schemas import EmailTemplateUpsert
from paperchai.domain.email_templates.service import EmailTemplateService
from paperchai.models import User, Workspace
from paperchai.models_invoice import EmailTemplate, InvoiceReminderSchedule, InvoiceReminderStep


def template_payload(**overrides):
    data = {
        "slug": "first-nudge",
        "name": "First nudge",
        "subject": "Invoice {{invoiceId}}",
        "body": "Hi {{clientName}}",
    }
    data.update(overrides)
    return EmailTemplateUpsert(**data)


def test_upsert_creates_with_defaults(db, owner, workspace):
    template = EmailTemplateService(db).upsert_template(template_payload(), owner)

    assert template.workspace_id == workspace.id
    assert template.theme == "modern"
    assert template.brand_color == "#0f172a"


def test_upsert_updates_same_slug(db, owner, workspace):
    service = EmailTemplateService(db)
    first = service.upsert_template(template_payload(), owner)

    second = service.upsert_template(
        template_payload(subject="Updated {{invoiceId}}", theme="noir", brand_color="#ff0000"), owner
    )

    assert second.id == first.id
    assert second.subject == "Updated {{invoiceId}}"
    assert (second.theme, second.brand_color) == ("noir", "#ff0000")
    assert db.query(EmailTemplate).count() == 1


@pytest.mark.parametrize("missing", ["slug", "name", "subject", "body"])
def test_upsert_requires_fields(db, owner, workspace, missing):
    with pytest.raises(HTTPException) as exc:
        EmailTemplateService(db).upsert_template(template_payload(**{missing: None}), owner)

    assert exc.value.status_code == 400
    assert exc.value.detail == "Missing required fields: slug, name, subject, body"


def test_unknown_theme_is_invalid():
    with pytest.raises(ValidationError):
        template_payload(theme="neon")


def test_list_is_scoped_to_workspace(db, owner, workspace, email_template):
    other_ws = Workspace(name="Other")
    db.add(other_ws)
    db.commit()
    db.add(EmailTemplate(workspace_id=other_ws.id, slug="theirs", name="Theirs", subject="s", body="b"))
    db.commit()

    templates = EmailTemplateService(db).list_templates(owner)

    assert [t.slug for t in templates] == ["gentle-nudge"]


def test_delete_other_workspace_template_is_forbidden(db, owner, workspace):
    other_ws = Workspace(name="Other")
    db.add(other_ws)
    db.commit()
    foreign = EmailTemplate(workspace_id=other_ws.id, slug="theirs", name="Theirs", subject="s", body="b")
    db.add(foreign)
    db.commit()

    with pytest.raises(HTTPException) as exc:
        EmailTemplateService(db).delete_template(foreign.id, owner)

    assert exc.value.status_code == 403
    assert db.query(EmailTemplate).count() == 1


def test_delete_missing_template(db, owner, workspace):
    with pytest.raises(HTTPException) as exc:
        EmailTemplateService(db).delete_template(999, owner)
    assert exc.value.status_code == 404


def test_delete_detaches_reminder_steps(db, owner, invoice, email_template):
    schedule = InvoiceReminderSchedule(invoice_id=invoice.id, workspace_id=invoice.workspace_id)
    db.add(schedule)
    db.flush()
    step = InvoiceReminderStep(
        schedule_id=schedule.id,
        index=0,
        offset_from_due_in_minutes=0,
        send_at=datetime(2025, 1, 10, 9, 0),
        email_template_id=email_template.id,
    )
    db.add(step)
    db.commit()

    assert EmailTemplateService(db).delete_template(email_template.id, owner) == {
        "message": "Template deleted"
    }

    db.refresh(step)
    assert step.email_template_id is None
    assert db.query(EmailTemplate).count() == 0


def test_requires_active_workspace(db):
    loner = User(email="loner@studio.test")
    db.add(loner)
    db.commit()

    with pytest.raises(HTTPException) as exc:
        EmailTemplateService(db).list_templates(loner)
    assert exc.value.status_code == 404
