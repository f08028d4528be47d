from datetime import datetime

SESSIONS = "/api/study-sessions"


def _session_payload(**overrides):
    payload = {
        "subject": "Math",
        "startTime": "2026-11-02T09:00:00Z",
        "endTime": "2026-11-02T10:00:00Z",
        "description": "Limits and continuity",
    }
    payload.update(overrides)
    return payload


def _upload(client, headers, subject="Math", title="Chapter 1"):
    response = client.post(
        "/api/notes/upload",
        headers=headers,
        data={"subject": subject, "title": title},
        files={"note": ("chapter1.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_sessions_require_auth(client):
    assert client.get(SESSIONS).status_code == 401


def test_list_starts_empty(client, auth_headers):
    response = client.get(SESSIONS, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == []


def test_create_and_list(client, auth_headers):
    response = client.post(
        SESSIONS, headers=auth_headers, json=_session_payload(isAIGenerated=True)
    )
    assert response.status_code == 201
    created = response.json()
    assert created["subject"] == "Math"
    assert created["status"] == "scheduled"
    assert created["progress"] == 0
    assert created["isAIGenerated"] is True
    assert datetime.fromisoformat(created["startTime"].replace("Z", "+00:00")).hour == 9

    listed = client.get(SESSIONS, headers=auth_headers).json()
    assert [item["id"] for item in listed] == [created["id"]]


def test_sessions_are_listed_in_start_order(client, auth_headers):
    client.post(
        SESSIONS,
        headers=auth_headers,
        json=_session_payload(startTime="2026-11-05T09:00:00Z", endTime="2026-11-05T10:00:00Z"),
    )
    client.post(SESSIONS, headers=auth_headers, json=_session_payload(subject="Physics"))

    listed = client.get(SESSIONS, headers=auth_headers).json()
    assert [item["subject"] for item in listed] == ["Physics", "Math"]


def test_end_must_follow_start(client, auth_headers):
    response = client.post(
        SESSIONS,
        headers=auth_headers,
        json=_session_payload(endTime="2026-11-02T09:00:00Z"),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "End time must be after start time"


def test_repeated_create_with_generation_id_is_idempotent(client, auth_headers):
    payload = _session_payload(generationId="gen-1", isAIGenerated=True)

    first = client.post(SESSIONS, headers=auth_headers, json=payload)
    second = client.post(SESSIONS, headers=auth_headers, json=payload)
    other_generation = client.post(
        SESSIONS, headers=auth_headers, json=_session_payload(generationId="gen-2")
    )

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert other_generation.status_code == 201
    assert len(client.get(SESSIONS, headers=auth_headers).json()) == 2


def test_update_session(client, auth_headers):
    session_id = client.post(SESSIONS, headers=auth_headers, json=_session_payload()).json()["id"]

    response = client.put(
        f"{SESSIONS}/{session_id}",
        headers=auth_headers,
        json=_session_payload(subject="Physics", description="Kinematics"),
    )

    assert response.status_code == 200
    assert response.json()["subject"] == "Physics"
    assert response.json()["description"] == "Kinematics"


def test_progress_and_completion_move_together(client, auth_headers):
    session_id = client.post(SESSIONS, headers=auth_headers, json=_session_payload()).json()["id"]
    url = f"{SESSIONS}/{session_id}"

    partial = client.patch(url, headers=auth_headers, json={"progress": 40}).json()
    assert (partial["status"], partial["progress"]) == ("scheduled", 40)

    done = client.patch(url, headers=auth_headers, json={"progress": 100}).json()
    assert done["status"] == "completed"

    reopened = client.patch(
        url, headers=auth_headers, json={"status": "scheduled", "progress": 50}
    ).json()
    assert (reopened["status"], reopened["progress"]) == ("scheduled", 50)

    completed = client.patch(url, headers=auth_headers, json={"status": "completed"}).json()
    assert completed["progress"] == 100


def test_progress_out_of_range(client, auth_headers):
    session_id = client.post(SESSIONS, headers=auth_headers, json=_session_payload()).json()["id"]
    response = client.patch(f"{SESSIONS}/{session_id}", headers=auth_headers, json={"progress": 120})
    assert response.status_code == 400


def test_delete_session(client, auth_headers):
    session_id = client.post(SESSIONS, headers=auth_headers, json=_session_payload()).json()["id"]

    response = client.delete(f"{SESSIONS}/{session_id}", headers=auth_headers)

    assert response.json() == {"message": "Session deleted successfully"}
    assert client.get(f"{SESSIONS}/{session_id}", headers=auth_headers).status_code == 404


def test_sessions_are_private(client, auth_headers, register):
    session_id = client.post(SESSIONS, headers=auth_headers, json=_session_payload()).json()["id"]
    other = register(email="other@example.com")
    other_headers = {"Authorization": f"Bearer {other['token']}"}

    assert client.get(SESSIONS, headers=other_headers).json() == []
    assert client.get(f"{SESSIONS}/{session_id}", headers=other_headers).status_code == 404
    assert client.delete(f"{SESSIONS}/{session_id}", headers=other_headers).status_code == 404


def test_document_must_match_subject(client, auth_headers):
    note = _upload(client, auth_headers, subject="Physics")

    response = client.post(
        SESSIONS, headers=auth_headers, json=_session_payload(documentId=note["id"])
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Document not found or does not match subject"


def test_sessions_include_subject_documents(client, auth_headers):
    note = _upload(client, auth_headers)
    client.post(SESSIONS, headers=auth_headers, json=_session_payload(documentId=note["id"]))

    session = client.get(SESSIONS, headers=auth_headers).json()[0]

    assert session["documentId"] == note["id"]
    assert session["documents"][0]["title"] == "Chapter 1"
    assert session["documents"][0]["type"] == "pdf"


def test_create_dummy_needs_notes(client, auth_headers):
    response = client.post(f"{SESSIONS}/create-dummy", headers=auth_headers)
    assert response.status_code == 400

    _upload(client, auth_headers, subject="Chemistry")
    response = client.post(f"{SESSIONS}/create-dummy", headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["session"]["subject"] == "Chemistry"
    assert body["document"]["title"] == "Chapter 1"
    assert body["message"] == "Dummy session created with subject: Chemistry"
