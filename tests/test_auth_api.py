"""End-to-end tests for /send-otp and /verify-otp."""

from __future__ import annotations

import httpx
import pytest
from sqlalchemy import func, select

from otp_auth.api.dependencies import get_user_registrar
from otp_auth.errors import PersistenceError
from otp_auth.models.user import User
from otp_auth.services.otp_service import OTPService
from otp_auth.services.token_issuer import TokenIssuer

from conftest import TEST_PHONE, TEST_SECRET


def _stored_code(app, phone: str = TEST_PHONE) -> str:
    code, found = app.state.otp_store.get(phone)
    assert found
    return code


async def _user_count(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(User))).scalar_one()


# ──────────────────────────────────────────────────────────
# Full flow
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_request_verify_issues_token(client, app, session_factory):
    resp = await client.post("/send-otp", json={"phone_number": TEST_PHONE})
    assert resp.status_code == 200
    assert resp.json() == {
        "statusCode": 200,
        "status": "success",
        "message": "OTP sent successfully",
    }
    code = _stored_code(app)
    assert len(code) == 6 and code.isdigit()

    resp = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": code})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "Ok"
    assert body["message"] == "OTP verified successfully"

    claims = app.state.token_issuer.decode_token(body["data"]["access_token"])
    assert claims["exp"] > claims["iat"]
    assert claims["exp"] - claims["iat"] == 15 * 60
    assert await _user_count(session_factory) == 1


@pytest.mark.asyncio
async def test_replay_within_ttl_registers_once(client, app, session_factory):
    await client.post("/send-otp", json={"phone_number": TEST_PHONE})
    code = _stored_code(app)

    first = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": code})
    second = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": code})

    assert first.status_code == 200
    assert second.status_code == 200
    assert await _user_count(session_factory) == 1


# ──────────────────────────────────────────────────────────
# /send-otp failures
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_fourth_request_is_rate_limited(client):
    for _ in range(3):
        resp = await client.post("/send-otp", json={"phone_number": TEST_PHONE})
        assert resp.status_code == 200

    resp = await client.post("/send-otp", json={"phone_number": TEST_PHONE})

    assert resp.status_code == 429
    assert resp.json() == {
        "statusCode": 429,
        "status": "error",
        "message": "Too many OTP requests. Please try again after 10 minutes.",
    }
    assert 1 <= int(resp.headers["Retry-After"]) <= 600


@pytest.mark.asyncio
async def test_rate_limit_is_per_phone(client):
    for _ in range(3):
        await client.post("/send-otp", json={"phone_number": TEST_PHONE})

    resp = await client.post("/send-otp", json={"phone_number": "09350000000"})

    assert resp.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"phone_number": "9123456789"},
        {"phone_number": "0912345678"},
        {"phone_number": "08123456789"},
        {"phone_number": "+989123456789"},
    ],
)
async def test_bad_phone_is_bad_request(client, payload):
    resp = await client.post("/send-otp", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"statusCode": 400, "status": "error", "message": "bad parameters"}


@pytest.mark.asyncio
async def test_generation_failure_is_server_error(client, app):
    def broken(n):
        raise OSError("no entropy")

    app.state.otp_service = OTPService(app.state.otp_store, randbelow=broken)

    resp = await client.post("/send-otp", json={"phone_number": TEST_PHONE})

    assert resp.status_code == 500
    assert resp.json()["message"] == "OTP creation failed"


# ──────────────────────────────────────────────────────────
# /verify-otp failures
# ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_verify_without_request_is_not_found(client):
    resp = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": "123456"})

    assert resp.status_code == 404
    assert resp.json()["message"] == "OTP not found or expired"


@pytest.mark.asyncio
async def test_wrong_code_is_unauthorized(client, app, session_factory):
    await client.post("/send-otp", json={"phone_number": TEST_PHONE})
    code = _stored_code(app)
    wrong = "000000" if code != "000000" else "111111"

    resp = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": wrong})

    assert resp.status_code == 401
    assert resp.json()["message"] == "Incorrect OTP code"
    assert await _user_count(session_factory) == 0


@pytest.mark.asyncio
async def test_non_numeric_code_is_bad_request(client):
    resp = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": "12ab56"})

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_corrupt_record_is_server_error(client, app):
    app.state.otp_store.set(TEST_PHONE, 123456, 120)

    resp = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": "123456"})

    assert resp.status_code == 500
    assert resp.json()["message"] == "Internal error verifying OTP"


@pytest.mark.asyncio
async def test_registrar_failure_aborts_without_token(client, app):
    class FailingRegistrar:
        async def register_user(self, phone_number: str) -> bool:
            raise PersistenceError("database unavailable")

    app.dependency_overrides[get_user_registrar] = lambda: FailingRegistrar()
    await client.post("/send-otp", json={"phone_number": TEST_PHONE})
    code = _stored_code(app)

    resp = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": code})

    assert resp.status_code == 500
    assert resp.json()["message"] == "Error creating new user"
    assert "data" not in resp.json()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("secret", "expiry"),
    [(TEST_SECRET, "not-a-duration"), ("", "15m")],
)
async def test_token_failures_are_server_errors(client, app, session_factory, secret, expiry):
    app.state.token_issuer = TokenIssuer(secret, expiry)
    await client.post("/send-otp", json={"phone_number": TEST_PHONE})
    code = _stored_code(app)

    resp = await client.post("/verify-otp", json={"phone_number": TEST_PHONE, "otp": code})

    assert resp.status_code == 500
    assert resp.json()["message"] == "Error generating access token"
    # The user is still registered; only the token step failed
    assert await _user_count(session_factory) == 1


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_server_error(app):
    class ExplodingService:
        def verify(self, phone_number: str, code: str) -> bool:
            raise RuntimeError("boom")

    app.state.otp_service = ExplodingService()
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post(
            "/verify-otp", json={"phone_number": TEST_PHONE, "otp": "123456"}
        )

    assert resp.status_code == 500
    assert resp.json() == {
        "statusCode": 500,
        "status": "error",
        "message": "internal server error",
    }

