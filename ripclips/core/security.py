# ripclips/core/security.py
from datetime import datetime, timedelta, timezone

from fastapi import Header, HTTPException, Query
from jose import jwt, JWTError

from ripclips.core.config import settings

# Los tokens los emite el proveedor de auth; aquí solo los validamos.
ALGORITHM = "HS256"


def create_access_token(sub: str, expires_minutes: int = 1440) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {"sub": sub, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    sub = payload.get("sub")
    if not sub:
        raise JWTError("missing sub")
    return str(sub)


def _extract_token(token: str | None, authorization: str | None) -> str | None:
    """Token por ?token=... o por Authorization: Bearer ..."""
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1]
    return token or None


async def get_current_user_id(
    token: str | None = Query(None),
    authorization: str | None = Header(None),
) -> str:
    tok = _extract_token(token, authorization)
    if not tok:
        raise HTTPException(status_code=401, detail="missing token")
    try:
        return decode_access_token(tok)
    except JWTError:
        raise HTTPException(status_code=401, detail="invalid token")


async def get_optional_user_id(
    token: str | None = Query(None),
    authorization: str | None = Header(None),
) -> str | None:
    """
    Para el feed público: sin token → anónimo (None).
    Un token presente pero inválido sí es un 401.
    """
    tok = _extract_token(token, authorization)
    if not tok:
        return None
    try:
        return decode_access_token(tok)
    except JWTError:
        raise HTTPException(status_code=401, detail="invalid token")


def is_moderator(user_id: str) -> bool:
    return user_id in settings.moderator_ids
