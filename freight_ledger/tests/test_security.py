"""
Integration tests for authentication, token revocation and admin APIs.
"""

import pytest
from sqlalchemy import select

from freight_ledger.app.core.jwt import create_access_token
from freight_ledger.app.models.audit_log import AuditLog
from freight_ledger.app.services.audit import AuditAction

# Note: Client and DB setup are in conftest.py


@pytest.mark.asyncio
async def test_me_returns_current_user(client, accountant_user, accountant_headers):
    response = await client.get("/v1/auth/me", headers=accountant_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == accountant_user.id
    assert data["role"] == "ACCOUNTANT"


@pytest.mark.asyncio
async def test_invalid_and_missing_tokens(client, accountant_user):
    response = await client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_UNAUTHORIZED"

    # Valid signature, user that does not exist
    token = create_access_token(data={"sub": "ghost", "user_id": 424242, "role": "ADMIN"})
    response = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

    response = await client.get("/v1/auth/me")  # No token
    assert response.status_code in (401, 403)
    assert "error_code" in response.json()


@pytest.mark.asyncio
async def test_logout_revokes_token(client, accountant_headers, mock_redis):
    response = await client.post("/v1/auth/logout", headers=accountant_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = await client.get("/v1/auth/me", headers=accountant_headers)
    assert response.status_code == 401
    assert "revoked" in response.json()["message"].lower()


@pytest.mark.asyncio
async def test_blocked_user_loses_access_immediately(client, admin_headers, accountant_user, accountant_headers):
    """
    Blocked user should receive 401 immediately, not after token expiry.
    """
    response = await client.get("/v1/auth/me", headers=accountant_headers)
    assert response.status_code == 200

    block_response = await client.post(
        f"/v1/admin/users/{accountant_user.id}/block",
        headers=admin_headers,
        json={"reason": "Left the company"}
    )
    assert block_response.status_code == 200

    response = await client.get("/v1/auth/me", headers=accountant_headers)
    assert response.status_code == 401

    unblock_response = await client.post(
        f"/v1/admin/users/{accountant_user.id}/unblock",
        headers=admin_headers,
        json={}
    )
    assert unblock_response.status_code == 200

    response = await client.get("/v1/auth/me", headers=accountant_headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_role_change_applies_immediately(client, admin_headers, accountant_user, accountant_headers):
    response = await client.put(
        f"/v1/admin/users/{accountant_user.id}/role",
        headers=admin_headers,
        json={"role": "EMPLOYEE"}
    )
    assert response.status_code == 200

    # Tokens issued before the change are cut off
    response = await client.get("/v1/auth/me", headers=accountant_headers)
    assert response.status_code == 401

    # A fresh token works, with the new role
    token = create_access_token(data={"sub": "accountant", "user_id": accountant_user.id, "role": "EMPLOYEE"})
    headers = {"Authorization": f"Bearer {token}"}
    response = await client.get("/v1/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["role"] == "EMPLOYEE"

    response = await client.post("/v1/journal-entries", headers=headers, json={"description": "x", "lines": []})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_cannot_block_admin(client, admin_headers, db_session):
    from freight_ledger.app.models.user import User
    from freight_ledger.app.models.enums import UserRole

    other_admin = User(email="root@test.local", username="root", role=UserRole.ADMIN, is_active=True)
    db_session.add(other_admin)
    await db_session.commit()

    response = await client.post(f"/v1/admin/users/{other_admin.id}/block", headers=admin_headers, json={})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_user_management(client, admin_headers, employee_headers):
    response = await client.post("/v1/admin/users", headers=admin_headers, json={
        "email": "clerk@test.local",
        "username": "clerk",
        "role": "ACCOUNTANT"
    })
    assert response.status_code == 201
    clerk_id = response.json()["id"]

    duplicate = await client.post("/v1/admin/users", headers=admin_headers, json={
        "email": "other@test.local",
        "username": "clerk"
    })
    assert duplicate.status_code == 400

    response = await client.put(f"/v1/admin/users/{clerk_id}/role", headers=admin_headers, json={"role": "EMPLOYEE"})
    assert response.status_code == 200
    assert response.json()["role"] == "EMPLOYEE"

    response = await client.get("/v1/admin/users", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["total"] == 3  # admin, employee, clerk

    # Non-admins are kept out
    response = await client.get("/v1/admin/users", headers=employee_headers)
    assert response.status_code == 403
    assert response.json()["error_code"] == "ERR_FORBIDDEN"


@pytest.mark.asyncio
async def test_block_action_is_audited(client, admin_headers, employee_user, db_session):
    response = await client.post(
        f"/v1/admin/users/{employee_user.id}/block",
        headers=admin_headers,
        json={"reason": "Audit test"}
    )
    assert response.status_code == 200
    audit_log_id = response.json()["audit_log_id"]

    log = (await db_session.execute(select(AuditLog).where(AuditLog.id == audit_log_id))).scalar_one()
    assert log.action == AuditAction.USER_BLOCKED
    assert log.target_type == "user"
    assert log.target_id == str(employee_user.id)
    assert log.meta_data["reason"] == "Audit test"

    response = await client.get(
        "/v1/admin/audit-logs",
        headers=admin_headers,
        params={"action": AuditAction.USER_BLOCKED}
    )
    assert response.status_code == 200
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_error_responses_are_consistent(client):
    """
    All error responses should follow consistent format with error_code.
    """
    response = await client.get("/v1/auth/nonexistent")
    assert response.status_code == 404
    data = response.json()
    assert data["error_code"] == "ERR_NOT_FOUND"
    assert "message" in data


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["redis"] == "up"
    assert response.json()["database"] == "up"


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "batch-42"})
    assert response.headers["X-Correlation-ID"] == "batch-42"

    response = await client.get("/health")
    assert len(response.headers["X-Correlation-ID"]) == 32
