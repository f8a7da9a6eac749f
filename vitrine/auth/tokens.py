"""Admin bearer tokens.

A token is ``<payload>.<signature>``: a base64url JSON document carrying
``sub``, ``scope`` and ``exp``, signed with HMAC-SHA256 over the encoded
payload.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time

ADMIN_SCOPE = "catalog-admin"


def _sign(encoded_payload: str, secret: str) -> bytes:
    return hmac.new(secret.encode(), encoded_payload.encode(), hashlib.sha256).digest()


def create_admin_token(secret: str, subject: str, expires_in: int) -> str:
    """Issue a token granting access to the catalog admin API."""
    claims = {"sub": subject, "scope": ADMIN_SCOPE, "exp": int(time.time()) + expires_in}
    encoded = base64.urlsafe_b64encode(json.dumps(claims, separators=(",", ":")).encode()).decode()
    signature = base64.urlsafe_b64encode(_sign(encoded, secret)).decode()
    return f"{encoded}.{signature}"


def verify_admin_token(token: str, secret: str) -> dict | None:
    """Return the claims of a valid, unexpired admin token, else ``None``."""
    encoded, _, signature = token.partition(".")
    if not encoded or not signature or "." in signature:
        return None

    try:
        if not hmac.compare_digest(_sign(encoded, secret), base64.urlsafe_b64decode(signature)):
            return None
        claims = json.loads(base64.urlsafe_b64decode(encoded))
    except (binascii.Error, ValueError):
        return None

    if not isinstance(claims, dict) or claims.get("scope") != ADMIN_SCOPE:
        return None
    exp = claims.get("exp")
    if not isinstance(exp, (int, float)) or time.time() > exp:
        return None
    return claims
