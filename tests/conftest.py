import io
from datetime import date

import pytest

from regulacao import create_app
from regulacao.config import TestConfig
from regulacao.extensions import db
from regulacao.models import (
    Subscriber, User, Citizen, Professional, Care, Regulation, Schedule,
)

PASSWORD = "senha123"


def _make_app(tmp_path, **overrides):
    class Cfg(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")

    for key, value in overrides.items():
        setattr(Cfg, key, value)
    return create_app(Cfg())


@pytest.fixture
def app(tmp_path):
    app = _make_app(tmp_path)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def file_app(tmp_path):
    """App com sqlite em arquivo, para testes com várias conexões/threads."""
    app = _make_app(tmp_path, SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'race.db'}")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


def populate():
    """Dois municípios; o primeiro com 4 regulações e 2 agendamentos."""
    sms = Subscriber(name="SMS Campinas")
    other = Subscriber(name="SMS Sumaré")
    db.session.add_all([sms, other])
    db.session.flush()

    users = {}
    for key, role, sub in (
        ("manager", "manager", sms),
        ("operator", "operator", sms),
        ("operator2", "operator", sms),
        ("foreign", "manager", other),
        ("admin", "admin", None),
    ):
        u = User(
            matricula=key, nome=key.title(), role=role, status="active",
            subscriber_id=sub.id if sub else None,
        )
        u.set_password(PASSWORD)
        db.session.add(u)
        users[key] = u

    pending = User(matricula="pending", nome="Pendente", role="operator", status="pending", subscriber_id=sms.id)
    pending.set_password(PASSWORD)
    db.session.add(pending)

    care = Care(subscriber_id=sms.id, name="Consulta em Cardiologia")
    prof = Professional(subscriber_id=sms.id, name="Dra. Ana Souza", specialty="Cardiologia")
    db.session.add_all([care, prof])

    citizens = [
        Citizen(subscriber_id=sms.id, name="Maria da Silva", cpf="52998224725", cns="898001160660008",
                birth_date=date(1958, 3, 14)),
        Citizen(subscriber_id=sms.id, name="José Pereira", cpf="111.444.777-35", cns="700000000000005",
                birth_date=date(1971, 11, 2)),
        Citizen(subscriber_id=sms.id, name="Ana Oliveira", cpf="39053344705"),
        Citizen(subscriber_id=sms.id, name="Sem Documento"),
    ]
    foreign_citizen = Citizen(subscriber_id=other.id, name="Pedro Santos", cpf="12345678909")
    db.session.add_all(citizens + [foreign_citizen])
    db.session.flush()

    regulations = [
        Regulation(subscriber_id=sms.id, citizen_id=c.id, cares=[care], notes="anotação interna")
        for c in citizens
    ]
    foreign_reg = Regulation(subscriber_id=other.id, citizen_id=foreign_citizen.id)
    db.session.add_all(regulations + [foreign_reg])
    db.session.flush()

    schedules = [
        Schedule(subscriber_id=sms.id, regulation_id=regulations[0].id, citizen_id=citizens[0].id,
                 professional_id=prof.id),
        Schedule(subscriber_id=sms.id, regulation_id=None, citizen_id=citizens[1].id),
    ]
    db.session.add_all(schedules)
    db.session.commit()

    return {
        "subscriber": sms.id,
        "other_subscriber": other.id,
        "users": {k: u.id for k, u in users.items()},
        "citizens": [c.id for c in citizens],
        "regulations": [r.id for r in regulations],
        "foreign_regulation": foreign_reg.id,
        "schedules": [s.id for s in schedules],
    }


@pytest.fixture
def data(app):
    with app.app_context():
        return populate()


@pytest.fixture
def file_data(file_app):
    with file_app.app_context():
        return populate()


def login(client, matricula="manager"):
    res = client.post("/auth/login", data={"matricula_or_email": matricula, "password": PASSWORD})
    assert res.status_code == 302, res.data
    return client


@pytest.fixture
def staff(client, data):
    return login(client, "manager")


def issue(app, user_id, ids, item_type="REGULATION", batch_type="STATUS_UPDATE",
          expiry_hours=1, access_limit=3, now=None):
    from regulacao.blueprints.lists import services
    with app.app_context():
        user = db.session.get(User, user_id)
        batch = services.issue_list(user, ids, item_type, batch_type, expiry_hours, access_limit, now=now)
        return batch.hash


def fake_image(name="foto.jpg"):
    return (io.BytesIO(b"\xff\xd8\xff\xe0fake-jpeg"), name)
