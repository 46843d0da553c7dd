def _create(client, headers, **kw):
    body = {"employeeId": "EMP001", "name": "Ada Lovelace", "email": "ada@test.local", "department": "Engineering"}
    body.update(kw)
    return client.post("/api/employees", json=body, headers=headers)


def test_create_and_get(client, user_headers):
    r = _create(client, user_headers, hireDate="2024-02-01")
    assert r.status_code == 201
    e = r.get_json()["data"]
    assert e["employee_code"] == "EMP001"
    assert e["hire_date"] == "2024-02-01"

    r = client.get(f"/api/employees/{e['id']}", headers=user_headers)
    assert r.status_code == 200
    assert r.get_json()["data"]["name"] == "Ada Lovelace"


def test_create_validation(client, user_headers):
    r = client.post("/api/employees", json={"name": "No Code"}, headers=user_headers)
    assert r.status_code == 422
    r = _create(client, user_headers, email="not-an-email")
    assert r.status_code == 422


def test_duplicate_code_conflicts(client, user_headers):
    assert _create(client, user_headers).status_code == 201
    r = _create(client, user_headers, name="Someone Else")
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "EMPLOYEE_CODE_TAKEN"


def test_search_and_paging(client, user_headers):
    _create(client, user_headers, employeeId="E1", name="Grace Hopper", department="Navy")
    _create(client, user_headers, employeeId="E2", name="Alan Turing", department="Research")
    _create(client, user_headers, employeeId="E3", name="Katherine Johnson", department="Research")

    r = client.get("/api/employees?search=research", headers=user_headers)
    names = sorted(x["name"] for x in r.get_json()["data"])
    assert names == ["Alan Turing", "Katherine Johnson"]

    r = client.get("/api/employees?q=E1", headers=user_headers)
    assert [x["employee_code"] for x in r.get_json()["data"]] == ["E1"]

    r = client.get("/api/employees?limit=2&page=2&sort=name", headers=user_headers)
    body = r.get_json()
    assert body["meta"] == {"page": 2, "size": 2, "total": 3, "pages": 2, "has_next": False, "has_prev": True}
    assert [x["name"] for x in body["data"]] == ["Katherine Johnson"]


def test_update(client, user_headers):
    eid = _create(client, user_headers).get_json()["data"]["id"]
    r = client.put(f"/api/employees/{eid}", json={"position": "Analyst", "phone": "555-0100"}, headers=user_headers)
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["position"] == "Analyst"
    assert data["name"] == "Ada Lovelace"
    assert client.put("/api/employees/999", json={}, headers=user_headers).status_code == 404


def test_delete_guarded_by_assignments(client, user_headers, make_shift):
    eid = _create(client, user_headers).get_json()["data"]["id"]
    s = make_shift()
    r = client.post("/api/shift-assignments", json={"shiftId": s.id, "employeeId": eid}, headers=user_headers)
    aid = r.get_json()["data"]["id"]

    r = client.delete(f"/api/employees/{eid}", headers=user_headers)
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "EMPLOYEE_IN_USE"

    client.delete(f"/api/shift-assignments/{aid}", headers=user_headers)
    assert client.delete(f"/api/employees/{eid}", headers=user_headers).status_code == 200
    assert client.get(f"/api/employees/{eid}", headers=user_headers).status_code == 404
