"""Request and response schemas for RBAC, menus and content."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ROLE_NAME_REGEX = r"^[a-z0-9_-]+$"
PERMISSION_NAME_REGEX = r"^[a-z0-9._-]+$"
HEX_COLOR_REGEX = r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})$"


# Permissions

class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, pattern=PERMISSION_NAME_REGEX)
    display_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    group: Optional[str] = Field(None, max_length=100)


class PermissionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255, pattern=PERMISSION_NAME_REGEX)
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    group: Optional[str] = Field(None, max_length=100)


class PermissionResponse(BaseModel):
    id: int
    name: str
    display_name: str
    description: Optional[str] = None
    group: Optional[str] = None

    class Config:
        from_attributes = True


# Roles

class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, pattern=ROLE_NAME_REGEX)
    display_name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., max_length=1000)
    color: str = Field(..., pattern=HEX_COLOR_REGEX)
    permission_ids: Optional[List[int]] = None


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255, pattern=ROLE_NAME_REGEX)
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_REGEX)
    permission_ids: Optional[List[int]] = None


class RoleSummary(BaseModel):
    id: int
    name: str
    display_name: str
    color: Optional[str] = None
    is_system: bool

    class Config:
        from_attributes = True


class RoleResponse(RoleSummary):
    description: Optional[str] = None
    permissions: List[PermissionResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class AssignPermissionsRequest(BaseModel):
    permission_ids: List[int]


# User roles

class AssignRolesRequest(BaseModel):
    role_ids: List[int] = Field(..., min_length=1)


class SyncRolesRequest(BaseModel):
    role_ids: List[int]


class UserRolesResponse(BaseModel):
    user_id: int
    roles: List[RoleSummary]


class UserWithRoles(BaseModel):
    id: int
    name: str
    email: str
    is_active: bool
    roles: List[RoleSummary] = Field(default_factory=list)

    class Config:
        from_attributes = True


# Menus and content

class MenuNode(BaseModel):
    id: int
    name: str
    type: str
    icon: Optional[str] = None
    route_or_url: Optional[str] = None
    content_id: Optional[int] = None
    order: int
    children: List["MenuNode"] = Field(default_factory=list)


class MenuReorderItem(BaseModel):
    id: int
    order: int = Field(..., ge=0)
    parent_id: Optional[int] = None


class MenuReorderRequest(BaseModel):
    items: List[MenuReorderItem] = Field(..., min_length=1)


class MenuCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: Literal["list_menu", "content_menu"]
    parent_id: Optional[int] = None
    icon: Optional[str] = Field(None, max_length=100)
    route_or_url: Optional[str] = Field(None, max_length=500)
    content_id: Optional[int] = None
    order: Optional[int] = Field(None, ge=0)
    role_permissions_required: List[str] = Field(default_factory=list)


class MenuUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[Literal["list_menu", "content_menu"]] = None
    parent_id: Optional[int] = None
    icon: Optional[str] = Field(None, max_length=100)
    route_or_url: Optional[str] = Field(None, max_length=500)
    content_id: Optional[int] = None
    order: Optional[int] = Field(None, ge=0)
    role_permissions_required: Optional[List[str]] = None


class MenuResponse(BaseModel):
    id: int
    parent_id: Optional[int] = None
    name: str
    type: str
    icon: Optional[str] = None
    route_or_url: Optional[str] = None
    content_id: Optional[int] = None
    order: int
    role_permissions_required: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ContentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    type: Literal["custom", "embed_url"]
    custom_content: Optional[str] = None


class ContentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    type: Optional[Literal["custom", "embed_url"]] = None
    custom_content: Optional[str] = None


class ContentResponse(BaseModel):
    id: int
    title: str
    slug: str
    type: str
    custom_content: Optional[str] = None
    created_by_user_id: Optional[int] = None
    updated_by_user_id: Optional[int] = None
    published_at: Optional[datetime] = None

    class Config:
        from_attributes = True


MenuNode.model_rebuild()
