"""Tests for the /api/users endpoints and the access policy."""

from taskdesk.config import settings
from taskdesk.exceptions import IdentityProviderError
from taskdesk.models import User, UserRole, UserStatus
from taskdesk.services.identity_provider import Identity

from .conftest import ADMIN_ID, ADMIN_TOKEN, MEMBER_ID, MEMBER_TOKEN, auth


def _new_user(**overrides) -> dict:
    payload = {
        "name": "Nina New",
        "email": "nina@example.com",
        "department": "engineering",
        "designation": "Backend Engineer",
    }
    payload.update(overrides)
    return payload


def test_root_and_health(client) -> None:
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json()["status"] == "healthy"


def test_first_login_provisions_user(client, identity_provider, db_session) -> None:
    identity_provider.add_token(
        "newcomer-token",
        Identity(
            subject_id="auth0|newcomer",
            email="newcomer@example.com",
            display_name="Nora Newcomer",
            picture_url="https://cdn.test/nora.png",
        ),
    )

    response = client.get("/api/users", headers=auth("newcomer-token"))

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "auth0|newcomer"
    assert body["email"] == "newcomer@example.com"
    assert body["photo"] == "https://cdn.test/nora.png"
    assert body["status"] == "active"
    assert body["role"] == "user"
    assert db_session.query(User).filter(User.id == "auth0|newcomer").count() == 1


def test_admin_creates_user_with_new_identity(client, identity_provider, db_session) -> None:
    response = client.post("/api/users", json=_new_user(), headers=auth(ADMIN_TOKEN))

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "nina@example.com"
    assert body["role"] == "user"
    assert body["status"] == "active"
    assert body["department"] == "engineering"
    assert body["employee_id"] == str(settings.EMPLOYEE_ID_START)
    assert ("create_identity", "nina@example.com") in identity_provider.calls
    assert identity_provider.passwords[body["id"]] == settings.DEFAULT_USER_PASSWORD


def test_sequential_creations_get_increasing_employee_ids(client) -> None:
    ids = []
    for i in range(3):
        response = client.post(
            "/api/users",
            json=_new_user(name=f"User {i}", email=f"user{i}@example.com"),
            headers=auth(ADMIN_TOKEN),
        )
        assert response.status_code == 201
        ids.append(int(response.json()["employee_id"]))

    start = settings.EMPLOYEE_ID_START
    assert ids == [start, start + 1, start + 2]


def test_admin_create_reuses_existing_identity(client, identity_provider) -> None:
    identity_provider.identities["known@example.com"] = Identity(subject_id="auth0|known", email="known@example.com")

    response = client.post(
        "/api/users",
        json=_new_user(email="known@example.com", role="developer"),
        headers=auth(ADMIN_TOKEN),
    )

    assert response.status_code == 201
    assert response.json()["id"] == "auth0|known"
    assert response.json()["role"] == "developer"
    assert not any(call[0] == "create_identity" for call in identity_provider.calls)


def test_admin_create_with_taken_email_conflicts(client, identity_provider) -> None:
    response = client.post(
        "/api/users",
        json=_new_user(email="MEMBER@example.com"),
        headers=auth(ADMIN_TOKEN),
    )

    assert response.status_code == 409
    assert identity_provider.calls == []


def test_non_admin_cannot_create_user(client, identity_provider, db_session) -> None:
    response = client.post("/api/users", json=_new_user(), headers=auth(MEMBER_TOKEN))

    assert response.status_code == 403
    assert db_session.query(User).filter(User.email == "nina@example.com").count() == 0
    assert identity_provider.calls == []


def test_admin_role_is_checked_on_every_call(client, db_session, admin_user) -> None:
    assert client.get("/api/users/all", headers=auth(ADMIN_TOKEN)).status_code == 200

    admin_user.role = UserRole.USER
    db_session.commit()

    assert client.get("/api/users/all", headers=auth(ADMIN_TOKEN)).status_code == 403


def test_list_users_filters_and_paging(client, db_session) -> None:
    for i in range(5):
        db_session.add(User(
            id=f"auth0|qa{i}",
            name=f"Quinn {i}",
            email=f"quinn{i}@example.com",
            role=UserRole.QA,
            status=UserStatus.ACTIVE,
        ))
    db_session.add(User(id="auth0|gone", name="Quinn Gone", role=UserRole.QA, is_deleted=True))
    db_session.commit()

    response = client.get(
        "/api/users/all",
        params={"role": "qa", "sort_by": "name", "sort_order": "asc", "page": 2, "limit": 2},
        headers=auth(ADMIN_TOKEN),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 5
    assert [u["name"] for u in body["users"]] == ["Quinn 2", "Quinn 3"]

    search = client.get("/api/users/all", params={"search": "quinn 4"}, headers=auth(ADMIN_TOKEN)).json()
    assert [u["id"] for u in search["users"]] == ["auth0|qa4"]


def test_list_users_rejects_bad_paging(client) -> None:
    assert client.get("/api/users/all", params={"page": 0}, headers=auth(ADMIN_TOKEN)).status_code == 422
    assert client.get("/api/users/all", params={"limit": 500}, headers=auth(ADMIN_TOKEN)).status_code == 422
    assert client.get("/api/users/all", params={"sort_by": "id; drop"}, headers=auth(ADMIN_TOKEN)).status_code == 422


def test_non_admin_cannot_list_users(client) -> None:
    assert client.get("/api/users/all", headers=auth(MEMBER_TOKEN)).status_code == 403


def test_admin_updates_status_and_role(client) -> None:
    response = client.patch(
        f"/api/users/{MEMBER_ID}/status",
        json={"status": "inactive", "role": "team_lead", "designation": "Lead"},
        headers=auth(ADMIN_TOKEN),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "inactive"
    assert body["role"] == "team_lead"
    assert body["designation"] == "Lead"


def test_manual_employee_id_advances_sequence(client) -> None:
    response = client.patch(
        f"/api/users/{MEMBER_ID}/status",
        json={"status": "active", "employee_id": "20500"},
        headers=auth(ADMIN_TOKEN),
    )
    assert response.status_code == 200
    assert response.json()["employee_id"] == "20500"

    created = client.post("/api/users", json=_new_user(), headers=auth(ADMIN_TOKEN))
    assert created.json()["employee_id"] == "20501"


def test_manual_employee_id_must_be_unique(client, db_session, admin_user) -> None:
    admin_user.employee_id = "20001"
    db_session.commit()

    response = client.patch(
        f"/api/users/{MEMBER_ID}/status",
        json={"status": "active", "employee_id": "20001"},
        headers=auth(ADMIN_TOKEN),
    )

    assert response.status_code == 409


def test_blank_employee_id_is_rejected(client, db_session) -> None:
    for user_id in (MEMBER_ID, ADMIN_ID):
        response = client.patch(
            f"/api/users/{user_id}/status",
            json={"status": "active", "employee_id": ""},
            headers=auth(ADMIN_TOKEN),
        )
        assert response.status_code == 422

    assert db_session.query(User).filter(User.employee_id == "").count() == 0


def test_null_employee_id_keeps_assigned_id(client, db_session, member_user) -> None:
    member_user.employee_id = "20042"
    db_session.commit()

    response = client.patch(
        f"/api/users/{MEMBER_ID}/status",
        json={"status": "active", "employee_id": None},
        headers=auth(ADMIN_TOKEN),
    )

    assert response.status_code == 200
    assert response.json()["employee_id"] == "20042"


def test_failed_identity_revocation_keeps_user(client, identity_provider, db_session, member_user) -> None:
    identity_provider.delete_error = IdentityProviderError("Failed to delete user in Auth0")

    response = client.delete(f"/api/users/{MEMBER_ID}", headers=auth(ADMIN_TOKEN))

    assert response.status_code == 502
    db_session.refresh(member_user)
    assert member_user.is_deleted is False
    assert client.get(f"/api/users/{MEMBER_ID}", headers=auth(ADMIN_TOKEN)).status_code == 200


def test_status_update_for_missing_user(client) -> None:
    response = client.patch(
        "/api/users/auth0|ghost/status",
        json={"status": "active"},
        headers=auth(ADMIN_TOKEN),
    )

    assert response.status_code == 404


def test_non_admin_cannot_update_status(client) -> None:
    response = client.patch(
        f"/api/users/{ADMIN_ID}/status",
        json={"status": "inactive"},
        headers=auth(MEMBER_TOKEN),
    )

    assert response.status_code == 403


def test_get_profile_by_id(client) -> None:
    response = client.get(f"/api/users/{ADMIN_ID}", headers=auth(MEMBER_TOKEN))

    assert response.status_code == 200
    assert response.json()["email"] == "admin@example.com"
    assert client.get("/api/users/auth0|ghost", headers=auth(MEMBER_TOKEN)).status_code == 404


def test_update_own_profile_with_photo(client, uploader) -> None:
    response = client.patch(
        "/api/users",
        data={"phone": "+44 20 7946 0000", "gender": "Female", "birth_date": "1990-05-17"},
        files={"photo": ("me.png", b"\x89PNG fake", "image/png")},
        headers=auth(MEMBER_TOKEN),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["phone"] == "+44 20 7946 0000"
    assert body["gender"] == "Female"
    assert body["birth_date"] == "1990-05-17"
    assert body["photo"] == f"https://files.test/users/{MEMBER_ID}/me.png"
    assert body["name"] == "Max Member"
    assert uploader.uploads == [(f"users/{MEMBER_ID}", "me.png")]


def test_profile_email_follows_token_claim(client, identity_provider) -> None:
    identity_provider.add_token(
        MEMBER_TOKEN,
        Identity(subject_id=MEMBER_ID, email="max@newdomain.example", display_name="Max Member"),
    )

    response = client.patch("/api/users", data={"name": "Max M."}, headers=auth(MEMBER_TOKEN))

    assert response.status_code == 200
    assert response.json()["email"] == "max@newdomain.example"
    assert response.json()["name"] == "Max M."


def test_admin_deletes_user(client, identity_provider, db_session, member_user) -> None:
    response = client.delete(f"/api/users/{MEMBER_ID}", headers=auth(ADMIN_TOKEN))

    assert response.status_code == 200
    assert identity_provider.deleted == [MEMBER_ID]

    db_session.refresh(member_user)
    assert member_user.status == UserStatus.REJECTED
    assert member_user.is_deleted is True

    assert client.get(f"/api/users/{MEMBER_ID}", headers=auth(ADMIN_TOKEN)).status_code == 404
    # The deleted account can no longer authenticate
    assert client.get("/api/users", headers=auth(MEMBER_TOKEN)).status_code == 403


def test_admin_delete_missing_user(client, identity_provider) -> None:
    response = client.delete("/api/users/auth0|ghost", headers=auth(ADMIN_TOKEN))

    assert response.status_code == 404
    assert identity_provider.deleted == []


def test_non_admin_cannot_delete_user(client, identity_provider) -> None:
    response = client.delete(f"/api/users/{ADMIN_ID}", headers=auth(MEMBER_TOKEN))

    assert response.status_code == 403
    assert identity_provider.deleted == []


def test_delete_own_profile(client, db_session, member_user) -> None:
    response = client.delete("/api/users", headers=auth(MEMBER_TOKEN))

    assert response.status_code == 200
    db_session.refresh(member_user)
    assert member_user.is_deleted is True
    assert client.get(f"/api/users/{MEMBER_ID}", headers=auth(ADMIN_TOKEN)).status_code == 404
