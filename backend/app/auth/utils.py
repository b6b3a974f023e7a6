from jose import JWTError, jwt

from app.auth.settings import auth_settings


def decode_access_token(token: str) -> str | None:
    """Decode a provider-issued JWT. Returns the credential id (``sub``) or None."""
    options = {"verify_aud": auth_settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            auth_settings.JWT_SECRET_KEY,
            algorithms=[auth_settings.JWT_ALGORITHM],
            audience=auth_settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        return None
    credential_id = payload.get("sub")
    if not credential_id:
        return None
    return str(credential_id)
