"""Verification of session tokens issued by the identity provider."""

from __future__ import annotations

from typing import Any

from jose import JWTError, jwt

from .config import settings


def decode_token(token: str) -> dict[str, Any]:
    """Return the verified claims of a provider session token.

    Raises ``ValueError`` when the signature, expiry, issuer or audience
    does not check out.
    """
    options = {"verify_aud": settings.auth_jwt_audience is not None}
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_key,
            algorithms=settings.auth_jwt_algorithms,
            audience=settings.auth_jwt_audience,
            issuer=settings.auth_jwt_issuer,
            options=options,
        )
    except JWTError as exc:
        raise ValueError("Invalid session token") from exc


def extract_subject(claims: dict[str, Any]) -> str | None:
    """Return the normalized ``sub`` claim, or None when it is unusable."""
    subject = claims.get("sub")
    if isinstance(subject, int):
        return str(subject)
    if isinstance(subject, str):
        normalized = subject.strip()
        return normalized or None
    return None


def verify_subject(token: str) -> str:
    """Return the external subject id carried by a valid token."""
    subject = extract_subject(decode_token(token))
    if subject is None:
        raise ValueError("Session token has no subject")
    return subject
