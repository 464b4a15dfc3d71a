"""
Tests for retailer registration and profile lookup
"""
import pytest
from conftest import make_token
from models import Retailer


class TestRegistration:
    def test_register_creates_retailer(self, client, db_session):
        headers = {"Authorization": f"Bearer {make_token('new_user', email='new@shop.com')}"}
        resp = client.post(
            "/api/auth/register",
            json={"name": "  Fresh Shop  ", "email": "new@shop.com"},
            headers=headers,
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Registration successful"
        assert body["data"]["name"] == "Fresh Shop"
        assert body["data"]["theme"] == "default"
        assert body["data"]["user_id"] == "new_user"

        retailer = db_session.query(Retailer).filter(Retailer.user_id == "new_user").one()
        assert retailer.email == "new@shop.com"

    def test_register_twice_conflicts(self, client, auth_headers, sample_retailer):
        resp = client.post(
            "/api/auth/register",
            json={"name": "Second Store", "email": "owner@teststore.com"},
            headers=auth_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["success"] is False

    def test_register_requires_token(self, client):
        resp = client.post("/api/auth/register", json={"name": "Shop", "email": "a@b.com"})
        assert resp.status_code == 401

    @pytest.mark.parametrize("payload", [
        {"name": "A", "email": "a@b.com"},
        {"name": "Valid Name", "email": "not-an-email"},
        {"email": "a@b.com"},
    ])
    def test_register_validation(self, client, payload):
        headers = {"Authorization": f"Bearer {make_token('new_user')}"}
        resp = client.post("/api/auth/register", json=payload, headers=headers)
        assert resp.status_code == 400


class TestProfile:
    def test_me_returns_user_and_retailer(self, client, auth_headers, sample_retailer):
        resp = client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["user"] == {"id": "test_user_id", "email": "owner@teststore.com"}
        assert data["retailer"]["id"] == sample_retailer.id

    def test_me_without_profile_is_404(self, client, auth_headers, db_session):
        resp = client.get("/api/auth/me", headers=auth_headers)
        assert resp.status_code == 404
        assert "complete registration" in resp.json()["message"]

    def test_me_requires_token(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
