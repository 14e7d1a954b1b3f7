from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from paperchai import models_project  # noqa: F401
from paperchai.database import Base
from paperchai.models import Client, User, Workspace
from paperchai.models_invoice import EmailTemplate, Invoice


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def owner(db):
    user = User(email="owner@studio.test", full_name="Studio Owner")
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def workspace(db, owner):
    ws = Workspace(name="Studio Co", owner_id=owner.id, registered_email="billing@studio.test", country="India")
    db.add(ws)
    db.commit()
    owner.active_workspace_id = ws.id
    db.commit()
    return ws


@pytest.fixture
def client_record(db, workspace):
    client = Client(workspace_id=workspace.id, name="Acme", email="ap@acme.test")
    db.add(client)
    db.commit()
    return client


@pytest.fixture
def invoice(db, workspace, client_record):
    inv = Invoice(
        workspace_id=workspace.id,
        client_id=client_record.id,
        number="INV-0001",
        status="sent",
        currency="INR",
        total=1180.0,
        due_date=datetime(2025, 1, 10, 9, 0),
    )
    db.add(inv)
    db.commit()
    return inv


@pytest.fixture
def email_template(db, workspace):
    template = EmailTemplate(
        workspace_id=workspace.id,
        slug="gentle-nudge",
        name="Gentle nudge",
        subject="Invoice {{invoiceId}} due {{dueDate}}",
        body="Hi {{clientName}},\nplease pay {{amount}}.\n{{companyName}}",
        theme="minimal",
    )
    db.add(template)
    db.commit()
    return template
