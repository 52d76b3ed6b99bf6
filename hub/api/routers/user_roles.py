"""User role assignment API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hub.api.deps import get_db, get_subject
from hub.api.schemas.rbac import AssignRolesRequest, RoleSummary, SyncRolesRequest, UserRolesResponse, UserWithRoles
from hub.core.rbac.subject import Subject
from hub.services.rbac import RbacService

router = APIRouter(prefix="/users", tags=["user-roles"])


def _response(user_id: int, roles) -> UserRolesResponse:
    return UserRolesResponse(
        user_id=user_id,
        roles=[RoleSummary.model_validate(r) for r in sorted(roles, key=lambda r: r.name)],
    )


@router.get("", response_model=List[UserWithRoles])
async def list_users_with_roles(
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
    search: Optional[str] = Query(None, description="Filter by name or email"),
):
    """Users and the roles they hold, for the assignment screen."""
    users = RbacService(db).list_users(subject, search=search)
    return [
        UserWithRoles(
            id=u.id,
            name=u.name,
            email=u.email,
            is_active=bool(u.is_active),
            roles=[RoleSummary.model_validate(r) for r in sorted(u.roles, key=lambda r: r.name)],
        )
        for u in users
    ]


@router.get("/{user_id}/roles", response_model=UserRolesResponse)
async def get_user_roles(
    user_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """List a user's roles. Users may always see their own."""
    return _response(user_id, RbacService(db).user_roles(subject, user_id))


@router.post("/{user_id}/roles", response_model=UserRolesResponse)
async def assign_roles(
    user_id: int,
    payload: AssignRolesRequest,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Attach roles to a user, keeping the ones already held."""
    user = RbacService(db).assign_role(subject, user_id, payload.role_ids)
    return _response(user.id, user.roles)


@router.put("/{user_id}/roles", response_model=UserRolesResponse)
async def sync_roles(
    user_id: int,
    payload: SyncRolesRequest,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Replace a user's roles."""
    user = RbacService(db).sync_roles(subject, user_id, payload.role_ids)
    return _response(user.id, user.roles)


@router.delete("/{user_id}/roles/{role_id}", response_model=UserRolesResponse)
async def remove_role(
    user_id: int,
    role_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Detach one role from a user."""
    user = RbacService(db).remove_role(subject, user_id, role_id)
    return _response(user.id, user.roles)
