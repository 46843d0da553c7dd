from sqlalchemy.exc import OperationalError

from shift_api.extensions import db
from shift_api.models.shift_assignment import ShiftAssignment


def _assign(client, headers, shift_id, employee_id, **kw):
    body = {"shiftId": shift_id, "employeeId": employee_id}
    body.update(kw)
    return client.post("/api/shift-assignments", json=body, headers=headers)


def test_create_returns_row_with_shift_and_employee(client, user_headers, make_shift, make_employee):
    s, e = make_shift(name="Early"), make_employee(name="Lee")
    r = _assign(client, user_headers, s.id, e.id)
    assert r.status_code == 201
    data = r.get_json()["data"]
    assert data["status"] == "assigned"
    assert data["shift"]["name"] == "Early"
    assert data["employee"]["name"] == "Lee"


def test_create_error_codes(client, user_headers, make_shift, make_employee):
    s, e = make_shift(max_employees=1), make_employee()

    r = _assign(client, user_headers, 999, e.id)
    assert r.status_code == 404
    assert r.get_json()["error"]["code"] == "SHIFT_NOT_FOUND"

    r = _assign(client, user_headers, s.id, 999)
    assert r.status_code == 404
    assert r.get_json()["error"]["code"] == "EMPLOYEE_NOT_FOUND"

    assert _assign(client, user_headers, s.id, e.id).status_code == 201
    r = _assign(client, user_headers, s.id, e.id)
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "ASSIGNMENT_CONFLICT"

    r = _assign(client, user_headers, s.id, make_employee().id)
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "SHIFT_CAPACITY_EXCEEDED"


def test_create_validation(client, user_headers, make_shift, make_employee):
    s, e = make_shift(), make_employee()
    r = client.post("/api/shift-assignments", json={"shiftId": s.id}, headers=user_headers)
    assert r.status_code == 422
    r = _assign(client, user_headers, "abc", e.id)
    assert r.status_code == 422
    r = _assign(client, user_headers, s.id, e.id, status="sleeping")
    assert r.status_code == 422


def test_bulk_all_or_nothing(client, user_headers, make_shift, make_employee):
    s = make_shift(max_employees=2)
    ids = [make_employee().id for _ in range(3)]

    r = client.post("/api/shift-assignments/bulk", json={"shiftId": s.id, "employeeIds": ids}, headers=user_headers)
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "SHIFT_CAPACITY_EXCEEDED"
    r = client.get(f"/api/shift-assignments/shift/{s.id}", headers=user_headers)
    assert r.get_json()["meta"]["total"] == 0

    r = client.post("/api/shift-assignments/bulk", json={"shift_id": s.id, "employee_ids": ids[:2]},
                    headers=user_headers)
    assert r.status_code == 201
    assert r.get_json()["meta"]["count"] == 2


def test_bulk_validation_and_missing(client, user_headers, make_shift, make_employee):
    s, e = make_shift(), make_employee()
    r = client.post("/api/shift-assignments/bulk", json={"shiftId": s.id, "employeeIds": []}, headers=user_headers)
    assert r.status_code == 422
    r = client.post("/api/shift-assignments/bulk", json={"shiftId": s.id, "employeeIds": "1,2"},
                    headers=user_headers)
    assert r.status_code == 422
    r = client.post("/api/shift-assignments/bulk", json={"shiftId": s.id, "employeeIds": [e.id, 404]},
                    headers=user_headers)
    assert r.status_code == 404
    assert r.get_json()["error"]["detail"] == {"missing_employee_ids": [404]}


def test_list_filters(client, user_headers, make_shift, make_employee):
    s1, s2 = make_shift(), make_shift()
    e1, e2 = make_employee(), make_employee()
    _assign(client, user_headers, s1.id, e1.id)
    _assign(client, user_headers, s1.id, e2.id, status="completed")
    _assign(client, user_headers, s2.id, e1.id)

    r = client.get(f"/api/shift-assignments?shiftId={s1.id}", headers=user_headers)
    assert r.get_json()["meta"]["total"] == 2
    r = client.get(f"/api/shift-assignments?employeeId={e1.id}", headers=user_headers)
    assert r.get_json()["meta"]["total"] == 2
    r = client.get("/api/shift-assignments?status=completed", headers=user_headers)
    assert [x["employee_id"] for x in r.get_json()["data"]] == [e2.id]
    r = client.get(f"/api/shift-assignments/employee/{e2.id}", headers=user_headers)
    assert r.get_json()["meta"]["total"] == 1

    assert client.get("/api/shift-assignments?status=bogus", headers=user_headers).status_code == 422
    assert client.get("/api/shift-assignments/shift/999", headers=user_headers).status_code == 404
    assert client.get("/api/shift-assignments/employee/999", headers=user_headers).status_code == 404


def test_update_status_and_delete(client, user_headers, make_shift, make_employee):
    s, e = make_shift(), make_employee()
    aid = _assign(client, user_headers, s.id, e.id).get_json()["data"]["id"]

    for _ in range(2):
        r = client.put(f"/api/shift-assignments/{aid}", json={"status": "completed"}, headers=user_headers)
        assert r.status_code == 200
        assert r.get_json()["data"]["status"] == "completed"

    assert client.put(f"/api/shift-assignments/{aid}", json={}, headers=user_headers).status_code == 422
    assert client.put("/api/shift-assignments/999", json={"status": "completed"},
                      headers=user_headers).status_code == 404

    assert client.delete(f"/api/shift-assignments/{aid}", headers=user_headers).status_code == 200
    assert client.delete(f"/api/shift-assignments/{aid}", headers=user_headers).status_code == 404
    # pair is free again
    assert _assign(client, user_headers, s.id, e.id).status_code == 201


def test_fractional_ids_rejected(client, user_headers, make_shift, make_employee):
    s, e = make_shift(), make_employee()
    r = _assign(client, user_headers, s.id + 0.9, e.id)
    assert r.status_code == 422
    r = client.post("/api/shift-assignments/bulk", json={"shiftId": s.id, "employeeIds": [e.id + 0.5]},
                    headers=user_headers)
    assert r.status_code == 422
    # whole floats are still ints
    assert _assign(client, user_headers, float(s.id), e.id).status_code == 201


def test_storage_failure_is_generic_500(client, user_headers, make_shift, make_employee, monkeypatch):
    s, e = make_shift(), make_employee()
    shift_id, employee_id = s.id, e.id
    rollbacks = []
    session_cls = type(db.session())
    real_rollback = session_cls.rollback

    def broken_commit(self):
        raise OperationalError("INSERT INTO shift_assignments", {}, Exception("disk I/O error at /var/secret-detail"))

    def counting_rollback(self):
        rollbacks.append(1)
        real_rollback(self)

    monkeypatch.setattr(session_cls, "commit", broken_commit)
    monkeypatch.setattr(session_cls, "rollback", counting_rollback)

    r = _assign(client, user_headers, shift_id, employee_id)
    assert r.status_code == 500
    body = r.get_json()
    assert body["error"]["message"] == "Internal server error"
    assert body["error"]["code"] == "STORAGE_ERROR"
    assert "secret-detail" not in r.get_data(as_text=True)
    assert rollbacks

    monkeypatch.undo()
    assert not db.session.new
    assert ShiftAssignment.query.filter_by(shift_id=shift_id).count() == 0
