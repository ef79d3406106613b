"""
Tests for administrator sign-in by emailed code.
"""

from __future__ import annotations

import pytest

from conftest import last_code

from app.application.exceptions import AdminNotAllowedError, InvalidOrExpiredCodeError
from app.application.use_cases.admin_login import AdminLoginUseCase
from app.infrastructure.auth.session_tokens import JoseSessionTokens
from app.infrastructure.notifier.mock_notifier import MockNotifier


@pytest.fixture
def tokens() -> JoseSessionTokens:
    return JoseSessionTokens(secret="test-secret", lifetime_hours=1)


@pytest.fixture
def login(verification, notifier, tokens) -> AdminLoginUseCase:
    return AdminLoginUseCase(
        verification=verification,
        notifier=notifier,
        tokens=tokens,
        admin_email="Head@Patika.example",
        school_name="Patika Kindergarten",
    )


def test_code_grants_session(login, notifier, tokens):
    assert login.request_code(" head@patika.example ") is True
    assert notifier.sent[-1].to_email == "head@patika.example"

    token = login.verify_code("head@patika.example", last_code(notifier))

    claims = tokens.verify(token)
    assert claims["sub"] == "head@patika.example"
    assert claims["role"] == "admin"


def test_other_emails_refused(login, notifier):
    with pytest.raises(AdminNotAllowedError):
        login.request_code("parent@example.com")
    assert notifier.sent == []


def test_code_cannot_be_replayed(login, notifier):
    login.request_code("head@patika.example")
    code = last_code(notifier)

    login.verify_code("head@patika.example", code)
    with pytest.raises(InvalidOrExpiredCodeError):
        login.verify_code("head@patika.example", code)


def test_admin_code_lasts_ten_minutes(login, notifier, clock):
    login.request_code("head@patika.example")
    clock.advance(minutes=10)

    with pytest.raises(InvalidOrExpiredCodeError):
        login.verify_code("head@patika.example", last_code(notifier))


def test_delivery_failure_reported(verification, tokens):
    login = AdminLoginUseCase(
        verification=verification,
        notifier=MockNotifier(fail_with="offline"),
        tokens=tokens,
        admin_email="head@patika.example",
        school_name="Patika Kindergarten",
    )

    assert login.request_code("head@patika.example") is False


def test_tampered_token_rejected(tokens):
    token = tokens.issue("head@patika.example")

    assert tokens.verify(token + "x") is None
    assert JoseSessionTokens(secret="other-secret").verify(token) is None
