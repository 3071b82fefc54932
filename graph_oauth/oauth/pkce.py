"""Proof Key for Code Exchange (RFC 7636)."""

import hashlib
import secrets
from base64 import urlsafe_b64encode

CODE_CHALLENGE_METHOD = "S256"


def generate_pkce_pair() -> tuple[str, str, str]:
    """Generate PKCE code verifier and challenge.

    Returns:
        Tuple of (code_verifier, code_challenge, code_challenge_method)
    """
    # 32 random bytes -> 43 character verifier
    code_verifier = urlsafe_b64encode(secrets.token_bytes(32)).decode("utf-8").rstrip("=")

    code_challenge = (
        urlsafe_b64encode(hashlib.sha256(code_verifier.encode("utf-8")).digest())
        .decode("utf-8")
        .rstrip("=")
    )

    return code_verifier, code_challenge, CODE_CHALLENGE_METHOD
