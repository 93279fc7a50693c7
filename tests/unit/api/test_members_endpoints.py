"""HTTP tests for the member endpoints."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from dishes_api.auth.tokens import IssuedToken, TokenScope
from dishes_api.database.exceptions import DuplicateEmailError, EditConflictError
from dishes_api.services.members import InvalidActivationTokenError, PasswordPolicyError


if TYPE_CHECKING:
    from collections.abc import Callable
    from unittest.mock import MagicMock

    from fastapi.testclient import TestClient

    from dishes_api.database.repositories.members import Member


pytestmark = pytest.mark.unit

URL = "/api/v1/members"
REGISTRATION = {"name": "Alice", "email": "alice@example.com", "password": "pa55word!"}


class TestRegisterMember:
    """Tests for POST /members."""

    def test_returns_activation_token_and_member(
        self,
        client: TestClient,
        authority: MagicMock,
        member_service: MagicMock,
        make_member: Callable[..., Member],
    ) -> None:
        member = make_member(id=10, activated=False)
        member_service.register.return_value = (
            member,
            IssuedToken(
                plaintext="Q" * 26,
                member_id=10,
                scope=TokenScope.ACTIVATION,
                expiry=datetime(2024, 1, 4, tzinfo=UTC),
            ),
        )

        response = client.post(URL, json=REGISTRATION)

        assert response.status_code == 201
        body = response.json()
        assert body["activationToken"] == "Q" * 26
        assert body["member"]["id"] == 10
        assert body["member"]["activated"] is False
        assert "passwordHash" not in body["member"]
        assert "version" not in body["member"]
        member_service.register.assert_awaited_once_with(
            "Alice", "alice@example.com", "pa55word!"
        )

    def test_duplicate_email_is_field_error(
        self, client: TestClient, authority: MagicMock, member_service: MagicMock
    ) -> None:
        member_service.register.side_effect = DuplicateEmailError("alice@example.com")

        response = client.post(URL, json=REGISTRATION)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "email"
        assert body["details"][0]["code"] == "DUPLICATE_EMAIL"

    def test_password_policy_is_field_error(
        self, client: TestClient, authority: MagicMock, member_service: MagicMock
    ) -> None:
        member_service.register.side_effect = PasswordPolicyError(
            "must be at least 8 bytes long"
        )

        response = client.post(URL, json={**REGISTRATION, "password": "short"})

        assert response.status_code == 422
        assert response.json()["details"][0]["field"] == "password"

    def test_invalid_email_rejected(
        self, client: TestClient, authority: MagicMock, member_service: MagicMock
    ) -> None:
        response = client.post(URL, json={**REGISTRATION, "email": "not-an-email"})

        assert response.status_code == 422
        member_service.register.assert_not_awaited()

    def test_malformed_authorization_rejected_even_for_anonymous_route(
        self, client: TestClient, authority: MagicMock, member_service: MagicMock
    ) -> None:
        """A bad header is an error, not a silent fall back to anonymous."""
        response = client.post(
            URL, json=REGISTRATION, headers={"Authorization": "Token abc"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_CREDENTIAL"
        authority.resolve.assert_not_awaited()
        member_service.register.assert_not_awaited()


class TestActivateMember:
    """Tests for PUT /members/activated."""

    def test_activates(
        self,
        client: TestClient,
        authority: MagicMock,
        member_service: MagicMock,
        make_member: Callable[..., Member],
    ) -> None:
        member_service.activate.return_value = make_member(activated=True)

        response = client.put(f"{URL}/activated", json={"token": "Q" * 26})

        assert response.status_code == 200
        assert response.json()["member"]["activated"] is True

    def test_invalid_token_is_field_error(
        self, client: TestClient, authority: MagicMock, member_service: MagicMock
    ) -> None:
        member_service.activate.side_effect = InvalidActivationTokenError(
            "invalid or expired activation token"
        )

        response = client.put(f"{URL}/activated", json={"token": "Q" * 26})

        assert response.status_code == 422
        detail = response.json()["details"][0]
        assert detail["field"] == "token"
        assert detail["message"] == "invalid or expired activation token"

    def test_conflict(
        self, client: TestClient, authority: MagicMock, member_service: MagicMock
    ) -> None:
        member_service.activate.side_effect = EditConflictError("member 1 version 1")

        response = client.put(f"{URL}/activated", json={"token": "Q" * 26})

        assert response.status_code == 409
        assert response.json()["error"] == "EDIT_CONFLICT"


class TestCurrentMember:
    """Tests for GET and PATCH /members/me."""

    def test_get_requires_authentication(
        self, client: TestClient, authority: MagicMock
    ) -> None:
        response = client.get(f"{URL}/me")

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_REQUIRED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_get_allows_inactive_member(
        self,
        client: TestClient,
        authority: MagicMock,
        auth_headers: dict[str, str],
        make_member: Callable[..., Member],
    ) -> None:
        authority.resolve.return_value = make_member(activated=False)

        response = client.get(f"{URL}/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["member"]["email"] == "alice@example.com"

    def test_patch_requires_activation(
        self,
        client: TestClient,
        authority: MagicMock,
        member_service: MagicMock,
        auth_headers: dict[str, str],
        make_member: Callable[..., Member],
    ) -> None:
        authority.resolve.return_value = make_member(activated=False)

        response = client.patch(f"{URL}/me", json={"name": "Al"}, headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "INACTIVE_ACCOUNT"
        member_service.update_member.assert_not_awaited()

    def test_patch_passes_expected_version(
        self,
        client: TestClient,
        authority: MagicMock,
        member_service: MagicMock,
        auth_headers: dict[str, str],
        make_member: Callable[..., Member],
    ) -> None:
        member = make_member()
        authority.resolve.return_value = member
        member_service.update_member.return_value = make_member(name="Al", version=2)

        response = client.patch(
            f"{URL}/me",
            json={"name": "Al"},
            headers={**auth_headers, "X-Expected-Version": "1"},
        )

        assert response.status_code == 200
        assert response.json()["member"]["name"] == "Al"
        member_service.update_member.assert_awaited_once_with(
            member, name="Al", email=None, password=None, expected_version=1
        )

    def test_patch_conflict(
        self,
        client: TestClient,
        authority: MagicMock,
        member_service: MagicMock,
        auth_headers: dict[str, str],
        make_member: Callable[..., Member],
    ) -> None:
        authority.resolve.return_value = make_member()
        member_service.update_member.side_effect = EditConflictError("member 1")

        response = client.patch(
            f"{URL}/me",
            json={"name": "Al"},
            headers={**auth_headers, "X-Expected-Version": "7"},
        )

        assert response.status_code == 409
