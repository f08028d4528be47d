from study_planner.core.security import create_access_token
from study_planner.models.user import User


def test_register_and_login_flow(client):
    payload = {
        "email": "student@example.com",
        "password": "supersecure",
        "displayName": "Test Student",
    }
    register_response = client.post("/auth/register", json=payload)
    assert register_response.status_code == 201
    body = register_response.json()
    assert body["token"]
    assert body["user"]["displayName"] == "Test Student"
    assert "password" not in body["user"]

    login_response = client.post(
        "/auth/login",
        json={"email": payload["email"], "password": payload["password"]},
    )
    assert login_response.status_code == 200
    token = login_response.json()["token"]

    profile = client.get("/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.json()["email"] == payload["email"]


def test_duplicate_registration_is_rejected(client, register):
    register()
    response = client.post(
        "/auth/register",
        json={"email": "student@example.com", "password": "another1", "displayName": "Again"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


def test_wrong_password(client, register):
    register()
    response = client.post(
        "/auth/login", json={"email": "student@example.com", "password": "wrong-password"}
    )
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_password_account_required_for_login(client, db_session):
    db_session.add(User(email="google@example.com", display_name="G User"))
    db_session.commit()

    response = client.post("/auth/login", json={"email": "google@example.com", "password": "x"})

    assert response.status_code == 400
    assert "Google" in response.json()["detail"]


def test_profile_requires_a_valid_token(client):
    assert client.get("/auth/profile").status_code == 401

    response = client.get("/auth/profile", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"

    orphan = create_access_token(999)
    response = client.get("/auth/profile", headers={"Authorization": f"Bearer {orphan}"})
    assert response.json()["detail"] == "User not found"


def test_logout(client):
    assert client.post("/auth/logout").json() == {"message": "Logged out successfully"}


def test_register_requires_all_fields(client):
    response = client.post("/auth/register", json={"email": "student@example.com"})

    assert response.status_code == 400
    missing = {error["loc"][-1] for error in response.json()["detail"]}
    assert {"password", "displayName"} <= missing


def test_health(client):
    assert client.get("/").json() == {"message": "Study Planner API is running"}
