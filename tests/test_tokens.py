"""Tests for admin bearer tokens."""

import base64
import json
import time
from unittest.mock import patch

from vitrine.auth import tokens
from vitrine.auth.tokens import ADMIN_SCOPE, create_admin_token, verify_admin_token


def forge(claims: dict, secret: str = "secret") -> str:
    encoded = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode()
    signature = base64.urlsafe_b64encode(tokens._sign(encoded, secret)).decode()
    return f"{encoded}.{signature}"


class TestAdminToken:
    def test_token_has_two_parts(self):
        assert len(create_admin_token("secret", "ops", 300).split(".")) == 2

    def test_round_trip(self):
        token = create_admin_token("secret", "ops", 300)
        claims = verify_admin_token(token, "secret")
        assert claims["sub"] == "ops"
        assert claims["scope"] == ADMIN_SCOPE
        assert "exp" in claims

    def test_wrong_secret_returns_none(self):
        token = create_admin_token("secret", "ops", 300)
        assert verify_admin_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_admin_token("secret", "ops", 1)
        with patch("vitrine.auth.tokens.time") as mock_time:
            mock_time.time.return_value = time.time() + 10
            result = verify_admin_token(token, "secret")
        assert result is None

    def test_tampered_payload_returns_none(self):
        encoded, signature = create_admin_token("secret", "ops", 300).split(".")
        assert verify_admin_token(f"x{encoded[1:]}.{signature}", "secret") is None

    def test_malformed_token_returns_none(self):
        assert verify_admin_token("not-a-token", "secret") is None
        assert verify_admin_token("", "secret") is None
        assert verify_admin_token("a.b.c", "secret") is None
        assert verify_admin_token("a.!!!", "secret") is None

    def test_other_scope_rejected(self):
        token = forge({"sub": "ops", "scope": "preview", "exp": time.time() + 300})
        assert verify_admin_token(token, "secret") is None

    def test_missing_expiry_rejected(self):
        token = forge({"sub": "ops", "scope": ADMIN_SCOPE})
        assert verify_admin_token(token, "secret") is None
