# tests/test_auth.py
"""Tests for password hashing, JWT tokens, and the /auth endpoints."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import timedelta
from unittest.mock import patch

import pytest

from requisition.exceptions import DuplicateEmail
from requisition.models.user import User
from requisition.schemas.user import UserRegister
from requisition.services import auth_service


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = auth_service.hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert auth_service.verify_password("s3cret!", hashed)
        assert not auth_service.verify_password("wrong", hashed)

    def test_garbage_hash_does_not_verify(self):
        assert not auth_service.verify_password("anything", "not-a-bcrypt-hash")
        assert not auth_service.verify_password("anything", "")


class TestTokens:
    def test_round_trip(self, employee, test_settings):
        token = auth_service.create_access_token(employee, test_settings)
        payload = auth_service.decode_access_token(token, test_settings)
        assert payload["sub"] == str(employee.id)
        assert payload["role"] == "employee"

    def test_expired(self, employee, test_settings):
        token = auth_service.create_access_token(employee, test_settings, expires_delta=timedelta(seconds=-5))
        assert auth_service.decode_access_token(token, test_settings) is None

    def test_wrong_secret(self, employee, test_settings):
        token = auth_service.create_access_token(employee, test_settings)
        other = test_settings.model_copy(update={"JWT_SECRET_KEY": "another-secret"})
        assert auth_service.decode_access_token(token, other) is None


class TestAuthEndpoints:
    def test_register_creates_employee(self, client, db_session):
        resp = client.post("/api/auth/register", json={
            "name": "New Person", "email": " New.Person@Example.com ", "password": "hunter22"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["token"]
        assert data["user"]["email"] == "new.person@example.com"
        assert data["user"]["role"] == "employee"
        assert "password_hash" not in data["user"]
        assert db_session.query(User).filter(User.email == "new.person@example.com").count() == 1

    def test_register_cannot_choose_role(self, client):
        resp = client.post("/api/auth/register", json={
            "name": "Sneaky", "email": "sneaky@example.com", "password": "hunter22", "role": "admin"})
        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "employee"

    def test_register_duplicate_email(self, client, employee):
        resp = client.post("/api/auth/register", json={
            "name": "Again", "email": employee.email, "password": "hunter22"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "DUPLICATE_EMAIL"

    def test_register_validation(self, client):
        resp = client.post("/api/auth/register", json={
            "name": "", "email": "not-an-email", "password": "123"})
        assert resp.status_code == 400
        fields = {e["field"] for e in resp.json()["errors"]}
        assert fields == {"name", "email", "password"}

    def test_login(self, client, admin):
        resp = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "password123"})
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "admin"
        assert set(resp.json()) == {"message", "token", "user"}
        assert set(resp.json()["user"]) == {"id", "name", "email", "role", "created_at"}

    def test_login_wrong_password(self, client, admin):
        resp = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid email or password"

    def test_login_unknown_user(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "password123"})
        assert resp.status_code == 401

    def test_profile_and_verify(self, client, employee, auth_headers):
        resp = client.get("/api/auth/profile", headers=auth_headers(employee))
        assert resp.status_code == 200
        assert resp.json()["user"]["name"] == "Emma Employee"

        resp = client.post("/api/auth/verify", headers=auth_headers(employee))
        assert resp.json()["valid"] is True

    def test_logout(self, client, employee, auth_headers):
        resp = client.post("/api/auth/logout", headers=auth_headers(employee))
        assert resp.status_code == 200

    def test_missing_token(self, client):
        resp = client.get("/api/auth/profile")
        assert resp.status_code == 401
        assert resp.json()["error"] is True

    def test_invalid_token(self, client):
        resp = client.get("/api/auth/profile", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_token_for_deleted_user(self, client, employee, auth_headers, db_session):
        headers = auth_headers(employee)
        db_session.delete(employee)
        db_session.commit()
        assert client.get("/api/auth/profile", headers=headers).status_code == 401


class TestEmailTakenConcurrently:
    """The email was free at check time but the unique constraint fires on commit."""

    def test_register_reports_duplicate(self, db_session, employee):
        body = UserRegister(name="Twin", email=employee.email, password="hunter22")
        with patch("requisition.services.auth_service._email_taken", return_value=False):
            with pytest.raises(DuplicateEmail):
                auth_service.register_user(db_session, body)
        assert db_session.query(User).filter(User.email == employee.email).count() == 1

    def test_register_endpoint_returns_400(self, client, employee):
        with patch("requisition.services.auth_service._email_taken", return_value=False):
            resp = client.post("/api/auth/register", json={
                "name": "Twin", "email": employee.email, "password": "hunter22"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "DUPLICATE_EMAIL"
