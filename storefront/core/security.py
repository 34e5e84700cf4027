import jwt
from datetime import datetime, timezone, timedelta
from typing import Optional

from storefront.core.config import settings

def create_token(user_id: str, expires_in: timedelta = timedelta(days=7)) -> str:
    payload = {
        "user_id": user_id,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_token(token: str) -> Optional[str]:
    """Return the user id carried by a token, or None when the token can't be trusted"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    return payload.get("user_id") or payload.get("sub")

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        return None
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
