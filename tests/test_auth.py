import pytest

from vaccine_scheduler.core.security import UserRole, create_access_token, verify_token
from vaccine_scheduler.services.auth_service import AuthService

# Test data
test_account_data = {
    "username": "bob",
    "password": "TestPassword123"
}

test_login_data = {
    "username": "bob",
    "password": "TestPassword123",
    "role": "patient"
}


class TestAuthentication:

    def test_create_patient(self, client):
        """Test patient account creation."""
        response = client.post("/api/v1/auth/patients", json=test_account_data)
        assert response.status_code == 201

        data = response.json()
        assert data["username"] == "bob"
        assert data["role"] == "patient"
        assert "password" not in data
        assert "password_hash" not in data

    def test_create_duplicate_username(self, client):
        """Test account creation with a taken username."""
        client.post("/api/v1/auth/patients", json=test_account_data)

        response = client.post("/api/v1/auth/patients", json=test_account_data)
        assert response.status_code == 400
        assert response.json()["error"] == "DuplicateUsernameError"

    def test_same_username_in_each_role(self, client):
        """Patients and caregivers are separate namespaces."""
        assert client.post("/api/v1/auth/patients", json=test_account_data).status_code == 201
        assert client.post("/api/v1/auth/caregivers", json=test_account_data).status_code == 201

    def test_create_invalid_password(self, client):
        """Test account creation with a short password."""
        invalid_data = test_account_data.copy()
        invalid_data["password"] = "weak"

        response = client.post("/api/v1/auth/patients", json=invalid_data)
        assert response.status_code == 422

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/v1/auth/patients", json=test_account_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["role"] == "patient"

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        client.post("/api/v1/auth/patients", json=test_account_data)

        wrong_login = test_login_data.copy()
        wrong_login["password"] = "wrongpassword"

        response = client.post("/api/v1/auth/login", json=wrong_login)
        assert response.status_code == 401

    def test_login_wrong_role(self, client):
        """A patient account cannot log in as a caregiver."""
        client.post("/api/v1/auth/patients", json=test_account_data)

        wrong_role = test_login_data.copy()
        wrong_role["role"] = "caregiver"

        response = client.post("/api/v1/auth/login", json=wrong_role)
        assert response.status_code == 401

    def test_get_current_user(self, client, login_as):
        """Test getting current user info."""
        headers = login_as("caregiver", "alice")

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 200
        assert response.json()["username"] == "alice"
        assert response.json()["role"] == "caregiver"

    def test_get_current_user_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401

    def test_token_for_unknown_account(self, client):
        token = create_access_token("ghost", UserRole.PATIENT).access_token

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_logout_revokes_token(self, client, login_as):
        """Test logout."""
        headers = login_as("patient", "bob")

        response = client.post("/api/v1/auth/logout", headers=headers)
        assert response.status_code == 200

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401

    def test_rate_limit(self, client):
        """Account and login endpoints are limited per client."""
        statuses = [
            client.post("/api/v1/auth/login", json=test_login_data).status_code
            for _ in range(11)
        ]

        assert statuses[:10] == [401] * 10
        assert statuses[10] == 429


class TestCredentialStore:

    def test_verify(self, db):
        service = AuthService(db)
        service.create_caregiver("alice", "TestPassword123")

        assert service.verify("alice", "TestPassword123", UserRole.CAREGIVER)
        assert not service.verify("alice", "wrong", UserRole.CAREGIVER)
        assert not service.verify("alice", "TestPassword123", UserRole.PATIENT)
        assert service.find_caregiver("alice").password_hash != "TestPassword123"

    def test_token_round_trip(self):
        token = create_access_token("alice", UserRole.CAREGIVER)

        payload = verify_token(token.access_token)
        assert payload.sub == "alice"
        assert payload.role == UserRole.CAREGIVER
        assert payload.token_type == "access"
        assert verify_token(token.access_token + "x") is None

    def test_logout_without_valid_token(self, db, fake_redis):
        assert AuthService(db, fake_redis).logout("not-a-token") is False
