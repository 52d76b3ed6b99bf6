from typing import Callable, Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from hub.db.session import SessionLocal
from hub.db.models import User
from hub.core.rbac import gate, resolve_subject
from hub.core.rbac.subject import Subject
from hub.core.security import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    """Get current authenticated user from the bearer JWT."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token:
        user_id = decode_token(token)
        if user_id is not None:
            user = db.get(User, user_id)
            if user and user.is_active:
                return user

    raise credentials_exception


def get_subject(current_user: User = Depends(get_current_user)) -> Subject:
    """Resolve the current user's roles and permissions."""
    return resolve_subject(current_user)


def authorize(ability: str) -> Callable[..., Subject]:
    """
    Dependency factory guarding a route with a target-less gate ability.

    Usage:
        @router.get("", dependencies=[Depends(authorize("roles.view_any"))])

    Denials raise AuthorizationDenied, which the app renders as 403.
    """
    def dependency(subject: Subject = Depends(get_subject)) -> Subject:
        gate.authorize(subject, ability)
        return subject
    return dependency
