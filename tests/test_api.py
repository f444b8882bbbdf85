from .helpers import counter, form, make_activity, make_session

BASE = "/api/v1/registrations"


def submit(client, email, **extra):
    response = client.post(f"{BASE}/", json=form(email, **extra))
    assert response.status_code == 201, response.text
    return response.json()["registration"]["id"]


def test_submit_registration(client):
    response = client.post(
        f"{BASE}/",
        json=form("a@x.com", country="Kenya", specialRequirements="Halal meals"),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["registration"]["status"] == "pending"
    assert body["registration"]["country"] == "Kenya"
    assert body["registration"]["special_requirements"] == "Halal meals"


def test_submit_registration_errors(client):
    missing = client.post(f"{BASE}/", json={"email": "a@x.com"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Missing required fields: firstName, lastName, registrationType"

    submit(client, "a@x.com")
    duplicate = client.post(f"{BASE}/", json=form("a@x.com"))
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Email already registered"


def test_session_enrollment_flow(client, db):
    session_id = make_session(db, capacity=1)
    reg_id = submit(client, "a@x.com")
    other_id = submit(client, "b@x.com")

    created = client.post(f"{BASE}/sessions/{session_id}", json={"registration_id": reg_id})
    assert created.status_code == 201
    assert created.json()["session_id"] == session_id
    assert created.json()["status"] == "registered"

    duplicate = client.post(f"{BASE}/sessions/{session_id}", json={"registration_id": reg_id})
    assert duplicate.status_code == 400

    full = client.post(f"{BASE}/sessions/{session_id}", json={"registration_id": other_id})
    assert full.status_code == 400
    assert full.json()["detail"] == "Session is full"

    removed = client.delete(f"{BASE}/sessions/{session_id}/{reg_id}")
    assert removed.status_code == 200
    assert removed.json()["message"] == "Unregistered from session successfully"
    assert counter(db, "sessions", session_id) == 0

    again = client.delete(f"{BASE}/sessions/{session_id}/{reg_id}")
    assert again.status_code == 404


def test_enrollment_request_errors(client, db):
    session_id = make_session(db, status="draft")
    activity_id = make_activity(db)

    assert client.post(f"{BASE}/sessions/{session_id}", json={"registration_id": 1}).status_code == 404
    assert client.post(f"{BASE}/activities/{activity_id}", json={}).status_code == 400
    assert client.post(f"{BASE}/activities/{activity_id}").status_code == 400
    assert client.post(f"{BASE}/activities/{activity_id}", json={"registration_id": 77}).status_code == 404


def test_activity_enrollment_and_schedule(client, db):
    activity_id = make_activity(db, capacity=5, name="Boat trip")
    session_id = make_session(db, title="Opening")
    reg_id = submit(client, "a@x.com")

    created = client.post(f"{BASE}/activities/{activity_id}", json={"registration_id": str(reg_id)})
    assert created.status_code == 201
    assert created.json()["activity_id"] == activity_id
    client.post(f"{BASE}/sessions/{session_id}", json={"registration_id": reg_id})

    schedule = client.get(f"{BASE}/user/{reg_id}")
    assert schedule.status_code == 200
    body = schedule.json()
    assert [s["title"] for s in body["sessions"]] == ["Opening"]
    assert [a["name"] for a in body["activities"]] == ["Boat trip"]
    assert body["activities"][0]["registration_status"] == "registered"

    assert client.delete(f"{BASE}/activities/{activity_id}/{reg_id}").status_code == 200
    assert counter(db, "activities", activity_id) == 0


def test_list_registrations(client):
    for i in range(12):
        submit(client, f"smith{i}@example.com")
    submit(client, "jones@example.com", last_name="Jones")

    response = client.get(f"{BASE}/", params={"search": "smith", "page": 2, "limit": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {"total": 12, "page": 2, "limit": 10, "pages": 2}
    assert len(body["registrations"]) == 2

    defaults = client.get(f"{BASE}/").json()["pagination"]
    assert defaults["page"] == 1
    assert defaults["limit"] == 20
    assert defaults["total"] == 13


def test_status_transitions(client):
    reg_id = submit(client, "a@x.com")
    other_id = submit(client, "b@x.com")

    ok = client.patch(f"{BASE}/{reg_id}/status", json={"status": "under_review"})
    assert ok.status_code == 200
    assert ok.json()["registration"]["status"] == "under_review"

    assert client.patch(f"{BASE}/{reg_id}/status", json={"status": "bogus"}).status_code == 400
    assert client.patch(f"{BASE}/9999/status", json={"status": "approved"}).status_code == 404

    bulk = client.patch(f"{BASE}/bulk/status", json={"ids": [reg_id, other_id, 9999], "status": "approved"})
    assert bulk.status_code == 200
    assert bulk.json()["updatedCount"] == 2
    assert client.get(f"{BASE}/{other_id}").json()["registration"]["status"] == "approved"

    assert client.patch(f"{BASE}/bulk/status", json={"ids": [], "status": "approved"}).status_code == 400


def test_statistics_overview(client):
    first = submit(client, "a@x.com", registration_type="student")
    submit(client, "b@x.com", registration_type="student")
    submit(client, "c@x.com", registration_type="industry")
    client.patch(f"{BASE}/{first}/status", json={"status": "approved"})

    response = client.get(f"{BASE}/stats/overview")

    assert response.status_code == 200
    body = response.json()
    assert body["overview"]["total_registrations"] == 3
    assert body["overview"]["submitted"] == 2
    assert body["overview"]["approved"] == 1
    assert body["overview"]["waitlist"] == 0
    assert body["overview"]["new_this_week"] == 3
    assert body["by_type"] == [
        {"registration_type": "student", "count": 2},
        {"registration_type": "industry", "count": 1},
    ]


def test_update_and_delete(client, settings):
    proof = f"{settings.upload_dir}/proof.pdf"
    with open(proof, "wb") as fh:
        fh.write(b"%PDF")
    reg_id = submit(client, "a@x.com", paymentProofUrl=proof)

    updated = client.put(f"{BASE}/{reg_id}", json={"firstName": "Grace", "email": "grace@x.com"})
    assert updated.status_code == 200
    assert updated.json()["registration"]["first_name"] == "Grace"
    assert updated.json()["registration"]["email"] == "grace@x.com"
    assert client.put(f"{BASE}/9999", json={"firstName": "Nobody"}).status_code == 404

    deleted = client.delete(f"{BASE}/{reg_id}")
    assert deleted.status_code == 200
    assert deleted.json()["deletedId"] == reg_id
    assert client.get(f"{BASE}/{reg_id}").status_code == 404
    assert client.delete(f"{BASE}/{reg_id}").status_code == 404


def test_store_failure_is_reported_without_detail(client, db):
    with db.cursor() as cursor:
        cursor.execute("DROP TABLE registrations")

    response = client.get(f"{BASE}/stats/overview")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_out_of_range_ids_are_client_errors(client, db):
    session_id = make_session(db)
    huge = "99999999999999999999"

    body_id = client.post(f"{BASE}/sessions/{session_id}", json={"registration_id": huge})
    assert body_id.status_code == 400
    assert body_id.json()["detail"] == "Registration ID is out of range"

    for method, path in (
        ("GET", f"{BASE}/{huge}"),
        ("DELETE", f"{BASE}/{huge}"),
        ("POST", f"{BASE}/sessions/{huge}"),
        ("DELETE", f"{BASE}/activities/1/{huge}"),
        ("GET", f"{BASE}/user/{2**63}"),
    ):
        assert client.request(method, path).status_code == 422, path

    bulk = client.patch(f"{BASE}/bulk/status", json={"ids": [int(huge)], "status": "approved"})
    assert bulk.status_code == 400


def test_large_page_size_is_accepted(client):
    for i in range(3):
        submit(client, f"guest{i}@example.com")

    response = client.get(f"{BASE}/", params={"limit": 200, "page": 2**40})

    assert response.status_code == 200
    assert response.json()["registrations"] == []
    assert response.json()["pagination"]["limit"] == 200
