import jwt
import pytest
from fastapi.testclient import TestClient

from app import app
from config import Config

CHECK_IN = {
    "full_name": "Alice Martin",
    "mobile_number": "+15550100",
    "check_in": "2026-10-01T14:00:00Z",
    "check_out": "2026-10-03T11:00:00Z",
    "amount_paid": 80.0,
    "payment_mode": "card",
}


@pytest.fixture
def client(engine):
    # entering the context runs the startup hook (tables + admin user)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth(client):
    r = client.post("/api/auth/login", json={"username": Config.ADMIN_USERNAME, "password": Config.ADMIN_PASSWORD})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['token']}"}


def beds_of(client, auth, hotel_id=1):
    r = client.get(f"/api/hotels/{hotel_id}/beds", headers=auth)
    assert r.status_code == 200
    return {b["id"]: b for b in r.json()}


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_login_returns_token_and_user(client):
    r = client.post("/api/auth/login", json={"username": Config.ADMIN_USERNAME, "password": Config.ADMIN_PASSWORD})
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["username"] == Config.ADMIN_USERNAME
    assert body["user"]["role"] == "admin"
    assert "password_hash" not in body["user"]

    claims = jwt.decode(body["token"], Config.JWT_SECRET, algorithms=[Config.JWT_ALGORITHM])
    assert claims["username"] == Config.ADMIN_USERNAME
    assert claims["sub"] == str(body["user"]["id"])


@pytest.mark.parametrize("username,password", [(Config.ADMIN_USERNAME, "wrong"), ("nobody", Config.ADMIN_PASSWORD)])
def test_login_rejects_bad_credentials(client, username, password):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid credentials"


def test_api_requires_token(client):
    assert client.get("/api/hotels").status_code == 401
    r = client.get("/api/hotels", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    r = client.post("/api/customers/checkout", json={"customer_id": 1})
    assert r.status_code == 401


def test_lists_hotels_and_beds(client, auth, beds):
    r = client.get("/api/hotels", headers=auth)
    assert r.status_code == 200
    assert [h["name"] for h in r.json()] == ["Harbour Hostel"]

    listed = beds_of(client, auth)
    assert sorted(listed) == [1, 2, 3, 4, 5]
    assert all(b["status"] == "available" and b["customer"] is None for b in listed.values())
    assert client.get("/api/hotels/77/beds", headers=auth).json() == []


def test_check_in_check_out_flow(client, auth, beds):
    r = client.post("/api/customers", json={**CHECK_IN, "bed_id": 5}, headers=auth)
    assert r.status_code == 201
    stay_id = r.json()["id"]
    assert stay_id == 1

    bed = beds_of(client, auth)[5]
    assert bed["status"] == "occupied"
    assert bed["customer"]["full_name"] == "Alice Martin"
    assert bed["customer"]["check_out"] is None
    # the planned departure is kept apart from the real check-out
    assert bed["customer"]["expected_check_out"].startswith("2026-10-03T11:00:00")

    r = client.post("/api/customers", json={**CHECK_IN, "full_name": "Bob", "bed_id": 5}, headers=auth)
    assert r.status_code == 409
    assert r.json()["detail"] == "Bed is not available"

    r = client.post("/api/customers/checkout", json={"customer_id": stay_id}, headers=auth)
    assert r.status_code == 200
    assert r.json() == {"message": "Customer checked out successfully"}
    bed = beds_of(client, auth)[5]
    assert bed["status"] == "available"
    assert bed["customer"] is None

    r = client.post("/api/customers/checkout", json={"customer_id": stay_id}, headers=auth)
    assert r.status_code == 404


def test_check_in_unknown_bed(client, auth, beds):
    r = client.post("/api/customers", json={**CHECK_IN, "bed_id": 999}, headers=auth)
    assert r.status_code == 404
    assert r.json()["detail"] == "Bed not found"


def test_check_in_validates_body(client, auth, beds):
    r = client.post("/api/customers", json={"bed_id": 1, "full_name": "x"}, headers=auth)
    assert r.status_code == 422
    r = client.post("/api/customers", json={**CHECK_IN, "bed_id": 1, "amount_paid": -5}, headers=auth)
    assert r.status_code == 422
    assert beds_of(client, auth)[1]["status"] == "available"


def test_internal_failure_is_opaque(client, auth, beds, monkeypatch):
    import occupancy
    from sqlalchemy.exc import OperationalError

    def broken(session, bed, status):
        raise OperationalError("UPDATE beds ...", {}, Exception("database is locked"))

    monkeypatch.setattr(occupancy, "_set_bed_status", broken)
    r = client.post("/api/customers", json={**CHECK_IN, "bed_id": 2}, headers=auth)
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to check in customer"
    assert "locked" not in r.text
    assert beds_of(client, auth)[2]["status"] == "available"
