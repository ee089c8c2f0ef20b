"""
Token revocation against the in-memory Redis, and behaviour when Redis
is unreachable.
"""

import time
import pytest

from freight_ledger.app.core import token_revocation
from freight_ledger.app.core.jwt import create_access_token, decode_access_token


def _payload(user_id=7, **claims):
    token = create_access_token(data={"sub": "clerk", "user_id": user_id, "role": "ACCOUNTANT", **claims})
    return decode_access_token(token)


@pytest.mark.asyncio
async def test_logout_blacklists_only_that_token(mock_redis):
    first, second = _payload(), _payload()
    assert first["jti"] != second["jti"]

    assert await token_revocation.revoke_token(first) is True
    assert await token_revocation.is_token_revoked(first) is True
    assert await token_revocation.is_token_revoked(second) is False


@pytest.mark.asyncio
async def test_user_wide_revocation_spares_newer_tokens(mock_redis):
    old = _payload()
    await token_revocation.revoke_all_user_tokens(7)

    assert await token_revocation.are_user_tokens_revoked(old) is True
    assert await token_revocation.are_user_tokens_revoked({**old, "iat": time.time() + 5}) is False
    assert await token_revocation.are_user_tokens_revoked(_payload(user_id=8)) is False

    await token_revocation.clear_user_token_revocation(7)
    assert await token_revocation.are_user_tokens_revoked(old) is False


def test_decode_rejects_tokens_without_ledger_claims():
    token = create_access_token(data={"sub": "clerk", "user_id": 7})
    assert decode_access_token(token) is None
    assert decode_access_token("garbage") is None


@pytest.mark.asyncio
async def test_redis_outage_fails_open(mocker):
    mocker.patch.object(token_revocation, "get_redis", side_effect=ConnectionError("redis down"))
    payload = _payload()

    assert await token_revocation.revoke_token(payload) is False
    assert await token_revocation.is_token_revoked(payload) is False
    assert await token_revocation.are_user_tokens_revoked(payload) is False
