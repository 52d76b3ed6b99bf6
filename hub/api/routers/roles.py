"""Role management API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hub.api.deps import authorize, get_db, get_subject
from hub.api.schemas.common import SuccessResponse
from hub.api.schemas.rbac import AssignPermissionsRequest, RoleCreate, RoleResponse, RoleUpdate
from hub.core.rbac.subject import Subject
from hub.services.rbac import RbacService

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
    search: Optional[str] = Query(None, description="Filter by name or display name"),
):
    """List all roles with their permissions."""
    roles = RbacService(db).list_roles(subject, search=search)
    return [RoleResponse.model_validate(r) for r in roles]


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(authorize("roles.view")),
):
    """Get a specific role by ID."""
    return RoleResponse.model_validate(RbacService(db).get_role(role_id))


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    role_data: RoleCreate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Create a new custom role."""
    role = RbacService(db).create_role(subject, **role_data.model_dump())
    return RoleResponse.model_validate(role)


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    role_data: RoleUpdate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Update a role. System roles cannot be modified."""
    role = RbacService(db).update_role(subject, role_id, **role_data.model_dump(exclude_unset=True))
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", response_model=SuccessResponse)
async def delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Move a role to the trash. Fails while the role is assigned to users."""
    RbacService(db).delete_role(subject, role_id)
    return SuccessResponse(message="Role deleted successfully")


@router.post("/{role_id}/restore", response_model=RoleResponse)
async def restore_role(
    role_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    return RoleResponse.model_validate(RbacService(db).restore_role(subject, role_id))


@router.delete("/{role_id}/force", response_model=SuccessResponse)
async def force_delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Permanently delete a role, trashed or not."""
    RbacService(db).force_delete_role(subject, role_id)
    return SuccessResponse(message="Role permanently deleted")


@router.put("/{role_id}/permissions", response_model=RoleResponse)
async def assign_permissions(
    role_id: int,
    payload: AssignPermissionsRequest,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Replace the permission set of a role."""
    role = RbacService(db).assign_permissions(subject, role_id, payload.permission_ids)
    return RoleResponse.model_validate(role)
