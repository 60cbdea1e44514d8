from datetime import datetime, timedelta

import pytest

from regulacao.extensions import db
from regulacao.models import ListBatch, Regulation, User
from regulacao.blueprints.lists import services
from regulacao.blueprints.lists.errors import InvalidInput, Unauthorized

from conftest import login


def _body(data, **overrides):
    body = {
        "ids": data["regulations"][:2],
        "type": "REGULATION",
        "batchType": "STATUS_UPDATE",
        "expiryHours": 1,
        "accessLimit": 3,
    }
    body.update(overrides)
    return body


def test_generate_returns_link_and_summary(staff, data):
    res = staff.post("/api/lists/generate", json=_body(data))
    assert res.status_code == 201
    body = res.get_json()

    assert len(body["hash"]) >= 43
    assert body["link"].endswith(f"/list/{body['hash']}")
    assert body["type"] == "STATUS_UPDATE"
    assert body["itemType"] == "REGULATION"
    assert body["allowedActions"] == ["STATUS"]
    assert body["subscriberName"] == "SMS Campinas"
    assert body["itemIds"] == data["regulations"][:2]
    assert body["accessCount"] == 0
    assert body["accessLimit"] == 3
    assert body["itemCount"] == 2
    assert body["state"] == "active"


def test_generate_keeps_selection_order_and_drops_duplicates(staff, data):
    r1, r2, r3, _ = data["regulations"]
    res = staff.post("/api/lists/generate", json=_body(data, ids=[r3, r1, r3, r2]))
    assert res.status_code == 201
    assert res.get_json()["itemIds"] == [r3, r1, r2]


@pytest.mark.parametrize("batch_type,expected,actions", [
    ("UPLOAD", "DOCUMENT_UPLOAD", ["UPLOAD_REGULATION"]),
    ("SUPPLIER_LIST", "SUPPLIER_VIEW", []),
    ("SCHEDULE_AND_STATUS", "SCHEDULE_AND_STATUS", ["SCHEDULE", "STATUS"]),
])
def test_batch_type_defines_actions(staff, data, batch_type, expected, actions):
    res = staff.post("/api/lists/generate", json=_body(data, batchType=batch_type))
    assert res.status_code == 201
    body = res.get_json()
    assert body["type"] == expected
    assert body["allowedActions"] == actions


def test_two_lists_never_share_a_hash(staff, data):
    first = staff.post("/api/lists/generate", json=_body(data)).get_json()
    second = staff.post("/api/lists/generate", json=_body(data)).get_json()
    assert first["hash"] != second["hash"]


@pytest.mark.parametrize("overrides", [
    {"ids": []},
    {"ids": "1,2"},
    {"ids": [0]},
    {"type": "PATIENT"},
    {"batchType": "FOO"},
    {"expiryHours": 3},
    {"expiryHours": None},
    {"accessLimit": 0},
    {"accessLimit": 6},
    {"accessLimit": True},
    {"expiryHours": 1.9, "accessLimit": 5.9},
    {"accessLimit": 2.5},
    {"ids": [1.7]},
    {"expiryHours": "1h"},
    {"allowedActions": ["STATUS", "SCHEDULE"]},
])
def test_generate_rejects_bad_input(app, staff, data, overrides):
    res = staff.post("/api/lists/generate", json=_body(data, **overrides))
    assert res.status_code == 400
    assert res.get_json()["error"] == "invalid_input"
    with app.app_context():
        assert ListBatch.query.count() == 0


def test_generate_accepts_matching_allowed_actions(staff, data):
    res = staff.post("/api/lists/generate", json=_body(data, allowedActions=["STATUS"]))
    assert res.status_code == 201


def test_generate_accepts_numeric_strings(staff, data):
    res = staff.post("/api/lists/generate", json=_body(data, expiryHours="2", accessLimit=" 4 "))
    assert res.status_code == 201
    assert res.get_json()["accessLimit"] == 4


def test_generate_rejects_non_json_body(staff):
    res = staff.post("/api/lists/generate", data="ids=1")
    assert res.status_code == 400


def test_generate_respects_max_items(app, staff, data):
    app.config["LIST_MAX_ITEMS"] = 2
    res = staff.post("/api/lists/generate", json=_body(data, ids=data["regulations"][:3]))
    assert res.status_code == 400


def test_foreign_and_unknown_ids_are_unauthorized(app, staff, data):
    for ids in ([data["regulations"][0], data["foreign_regulation"]], [data["regulations"][0], 99999]):
        res = staff.post("/api/lists/generate", json=_body(data, ids=ids))
        assert res.status_code == 403
        assert res.get_json()["error"] == "unauthorized"
    with app.app_context():
        assert ListBatch.query.count() == 0


def test_deleted_record_cannot_be_listed(app, staff, data):
    with app.app_context():
        reg = db.session.get(Regulation, data["regulations"][0])
        reg.deleted_at = datetime(2026, 1, 1)
        db.session.commit()
    res = staff.post("/api/lists/generate", json=_body(data))
    assert res.status_code == 403


def test_other_subscriber_manager_is_unauthorized(client, data):
    login(client, "foreign")
    res = client.post("/api/lists/generate", json=_body(data))
    assert res.status_code == 403


def test_admin_sees_every_subscriber(client, data):
    login(client, "admin")
    res = client.post("/api/lists/generate", json=_body(data))
    assert res.status_code == 201
    assert res.get_json()["subscriberName"] == "SMS Campinas"


def test_mixed_subscribers_are_rejected_for_admin(app, data):
    with app.app_context():
        admin = db.session.get(User, data["users"]["admin"])
        with pytest.raises(InvalidInput):
            services.issue_list(
                admin, [data["regulations"][0], data["foreign_regulation"]],
                "REGULATION", "STATUS_UPDATE", 1, 3,
            )


def test_generate_requires_login(client, data):
    res = client.post("/api/lists/generate", json=_body(data))
    assert res.status_code == 401
    assert res.get_json()["error"] == "unauthenticated"


def test_issue_sets_expiry_from_hours(app, data):
    now = datetime(2026, 10, 18, 9, 0, 0)
    with app.app_context():
        user = db.session.get(User, data["users"]["operator"])
        batch = services.issue_list(user, data["schedules"], "SCHEDULE", "SCHEDULE_LIST", 8, 5, now=now)
        assert batch.expires_at == now + timedelta(hours=8)
        assert batch.created_at == now
        assert batch.created_by_id == user.id
        assert batch.item_ids == data["schedules"]
        assert batch.action_set == frozenset({"STATUS", "SCHEDULE"})


def test_issue_unknown_schedule_is_unauthorized(app, data):
    with app.app_context():
        user = db.session.get(User, data["users"]["operator"])
        with pytest.raises(Unauthorized):
            services.issue_list(user, [12345], "SCHEDULE", "STATUS_UPDATE", 1, 1)
