"""Helpers de seguridad para el disparador HTTP y el logging de secretos."""

import hmac


class TokenError(Exception):
    """Token bearer ausente o inválido."""


def verify_bearer_token(expected: str, authorization: str | None) -> None:
    """Valida un encabezado `Authorization: Bearer <token>` en tiempo constante."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise TokenError("Missing bearer token")
    if not hmac.compare_digest(expected.encode(), token.strip().encode()):
        raise TokenError("Invalid bearer token")


def mask_secret(value: str | None) -> str | None:
    """Enmascara secretos para logging seguro."""
    if not value:
        return value
    if len(value) <= 4:
        return "***"
    return f"{value[:2]}***{value[-2:]}"
