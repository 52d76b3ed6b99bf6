"""Permission management API endpoints."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hub.api.deps import authorize, get_db, get_subject
from hub.api.schemas.common import SuccessResponse
from hub.api.schemas.rbac import PermissionCreate, PermissionResponse, PermissionUpdate
from hub.core.rbac.subject import Subject
from hub.services.rbac import RbacService

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("", response_model=List[PermissionResponse])
async def list_permissions(
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
    group: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
):
    """List permissions, optionally filtered by group or name."""
    permissions = RbacService(db).list_permissions(subject, group=group, search=search)
    return [PermissionResponse.model_validate(p) for p in permissions]


@router.get("/grouped", response_model=Dict[str, List[PermissionResponse]])
async def list_grouped_permissions(
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """List permissions keyed by group, as the role editor shows them."""
    grouped: Dict[str, List[PermissionResponse]] = {}
    for p in RbacService(db).list_permissions(subject):
        grouped.setdefault(p.group or "other", []).append(PermissionResponse.model_validate(p))
    return grouped


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(authorize("permissions.view")),
):
    return PermissionResponse.model_validate(RbacService(db).get_permission(permission_id))


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    data: PermissionCreate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    permission = RbacService(db).create_permission(subject, **data.model_dump())
    return PermissionResponse.model_validate(permission)


@router.patch("/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: int,
    data: PermissionUpdate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    permission = RbacService(db).update_permission(
        subject, permission_id, **data.model_dump(exclude_unset=True)
    )
    return PermissionResponse.model_validate(permission)


@router.delete("/{permission_id}", response_model=SuccessResponse)
async def delete_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Delete a permission. Fails while the permission is assigned to roles."""
    RbacService(db).delete_permission(subject, permission_id)
    return SuccessResponse(message="Permission deleted successfully")


@router.post("/{permission_id}/restore", response_model=PermissionResponse)
async def restore_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    return PermissionResponse.model_validate(RbacService(db).restore_permission(subject, permission_id))


@router.delete("/{permission_id}/force", response_model=SuccessResponse)
async def force_delete_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    RbacService(db).force_delete_permission(subject, permission_id)
    return SuccessResponse(message="Permission permanently deleted")
