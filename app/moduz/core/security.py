"""Bearer token verification.

Tokens are issued by the identity provider; this service only verifies them and
reads the principal id (``sub``) and optional ``email``. Any other claim, a role
in particular, is ignored: authorization comes from the membership table.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi.security import HTTPBearer
from jose import jwt
from pydantic import BaseModel

from app.moduz.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    sub: str
    email: str | None = None


def create_access_token(data: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def create_principal_token(principal_id: str, email: str | None = None, expires_delta: Optional[timedelta] = None) -> str:
    claims: dict[str, Any] = {"sub": principal_id}
    if email:
        claims["email"] = email
    return create_access_token(claims, expires_delta=expires_delta)
