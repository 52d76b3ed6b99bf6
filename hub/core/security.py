from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from hub.core.config import get_settings

settings = get_settings()


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token for a user."""
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access"
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> Optional[int]:
    """Decode and validate a JWT token. Returns the user id if valid."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        return None
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None
