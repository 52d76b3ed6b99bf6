"""RBAC administration service.

Handles:
- Role CRUD and role-permission sync
- Permission CRUD
- Attaching, detaching and syncing a user's roles
- Restoring and force-deleting trashed roles and permissions

Every mutation re-checks the actor against the gate before touching the
database, so callers outside the HTTP layer get the same guarantees.
"""

from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import Session

from hub.common.logger import get_logger
from hub.core.errors import ConflictError, NotFoundError, ValidationError
from hub.core.rbac import gate, resolve_subject
from hub.core.rbac.permissions import is_valid_permission_name, is_valid_role_name
from hub.core.rbac.subject import Subject
from hub.db.models import Permission, Role, User

logger = get_logger("services.rbac")

# Marks a keyword the caller did not pass, so an explicit None can clear a field
_UNSET: Any = object()


class RbacService:
    """Role, permission and user-role administration."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_role(self, role_id: int, with_trashed: bool = False) -> Role:
        role = self.db.get(Role, role_id)
        if role is None or (role.trashed and not with_trashed):
            raise NotFoundError(f"Role {role_id} not found")
        return role

    def get_permission(self, permission_id: int, with_trashed: bool = False) -> Permission:
        permission = self.db.get(Permission, permission_id)
        if permission is None or (permission.trashed and not with_trashed):
            raise NotFoundError(f"Permission {permission_id} not found")
        return permission

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def list_roles(self, actor: Subject, search: Optional[str] = None) -> List[Role]:
        gate.authorize(actor, "roles.view_any")
        query = self.db.query(Role).filter(Role.active())
        if search:
            pattern = f"%{search}%"
            query = query.filter(Role.name.ilike(pattern) | Role.display_name.ilike(pattern))
        return query.order_by(Role.name).all()

    def list_permissions(
        self,
        actor: Subject,
        group: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Permission]:
        gate.authorize(actor, "permissions.view_any")
        query = self.db.query(Permission).filter(Permission.active())
        if group:
            query = query.filter(Permission.group == group)
        if search:
            pattern = f"%{search}%"
            query = query.filter(Permission.name.ilike(pattern) | Permission.display_name.ilike(pattern))
        return query.order_by(Permission.group, Permission.name).all()

    def user_roles(self, actor: Subject, user_id: int) -> List[Role]:
        user = self.get_user(user_id)
        gate.authorize(actor, "user_roles.view", resolve_subject(user))
        return sorted(user.roles, key=lambda r: r.name)

    def list_users(self, actor: Subject, search: Optional[str] = None) -> List[User]:
        """Users with their roles, for the role assignment screen."""
        gate.authorize(actor, "user_roles.view_any")
        query = self.db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(User.name.ilike(pattern) | User.email.ilike(pattern))
        return query.order_by(User.name, User.id).all()

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    def create_role(
        self,
        actor: Subject,
        *,
        name: str,
        display_name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
        permission_ids: Optional[Iterable[int]] = None,
    ) -> Role:
        gate.authorize(actor, "roles.create")
        self._check_role_name(name)

        role = Role(
            name=name,
            display_name=display_name,
            description=description,
            color=color,
            is_system=False,
        )
        self.db.add(role)
        self.db.flush()

        if permission_ids is not None:
            self._sync_role_permissions(actor, role, permission_ids)

        self.db.commit()
        self.db.refresh(role)
        logger.info(f"Role {role.name} created by user {actor.id}")
        return role

    def update_role(
        self,
        actor: Subject,
        role_id: int,
        *,
        name: Optional[str] = None,
        display_name: Optional[str] = None,
        description: Optional[str] = _UNSET,
        color: Optional[str] = _UNSET,
        permission_ids: Optional[Iterable[int]] = None,
    ) -> Role:
        role = self.get_role(role_id)
        gate.authorize(actor, "roles.update", role)

        if name is not None and name != role.name:
            self._check_role_name(name, exclude_id=role.id)
            role.name = name
        if display_name is not None:
            role.display_name = display_name
        if description is not _UNSET:
            role.description = description
        if color is not _UNSET:
            role.color = color

        if permission_ids is not None:
            gate.authorize(actor, "roles.assign_permissions", role)
            self._sync_role_permissions(actor, role, permission_ids)

        self.db.commit()
        self.db.refresh(role)
        logger.info(f"Role {role.name} updated by user {actor.id}")
        return role

    def delete_role(self, actor: Subject, role_id: int) -> None:
        role = self.get_role(role_id)
        gate.authorize(actor, "roles.delete", role)

        if role.users:
            raise ConflictError(
                "Cannot delete role that is assigned to users",
                details={"users_count": len(role.users)},
            )

        role.soft_delete()
        self.db.commit()
        logger.info(f"Role {role.name} deleted by user {actor.id}")

    def restore_role(self, actor: Subject, role_id: int) -> Role:
        role = self._trashed(Role, role_id)
        gate.authorize(actor, "roles.restore", role)
        role.restore()
        self.db.commit()
        self.db.refresh(role)
        logger.info(f"Role {role.name} restored by user {actor.id}")
        return role

    def force_delete_role(self, actor: Subject, role_id: int) -> None:
        """Remove a role row for good, along with its permission links."""
        role = self.get_role(role_id, with_trashed=True)
        gate.authorize(actor, "roles.force_delete", role)

        if role.users:
            raise ConflictError(
                "Cannot delete role that is assigned to users",
                details={"users_count": len(role.users)},
            )

        name = role.name
        self.db.delete(role)
        self.db.commit()
        logger.info(f"Role {name} permanently deleted by user {actor.id}")

    def assign_permissions(self, actor: Subject, role_id: int, permission_ids: Iterable[int]) -> Role:
        """Replace a role's permission set."""
        role = self.get_role(role_id)
        gate.authorize(actor, "roles.assign_permissions", role)
        self._sync_role_permissions(actor, role, permission_ids)
        self.db.commit()
        self.db.refresh(role)
        logger.info(f"Permissions of role {role.name} synced by user {actor.id}")
        return role

    def _sync_role_permissions(self, actor: Subject, role: Role, permission_ids: Iterable[int]) -> None:
        wanted = self._load_by_ids(Permission, permission_ids, "permission_ids")
        current = {p.id for p in role.permissions}

        # Only links that are new need the per-permission check
        for permission in wanted:
            if permission.id not in current:
                gate.authorize(actor, "roles.assign_permission", role, permission)

        role.permissions = wanted
        self.db.flush()

    def _check_role_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        if not is_valid_role_name(name):
            raise ValidationError.for_field(
                "name", "The name may only contain lowercase letters, numbers, hyphens and underscores."
            )
        # Trashed roles keep their name until force-deleted
        query = self.db.query(Role).filter(Role.name == name)
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        if query.first() is not None:
            raise ValidationError.for_field("name", "The name has already been taken.")

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------

    def create_permission(
        self,
        actor: Subject,
        *,
        name: str,
        display_name: str,
        description: Optional[str] = None,
        group: Optional[str] = None,
    ) -> Permission:
        gate.authorize(actor, "permissions.create")
        self._check_permission_name(name)

        permission = Permission(
            name=name,
            display_name=display_name,
            description=description,
            group=group,
        )
        self.db.add(permission)
        self.db.commit()
        self.db.refresh(permission)
        logger.info(f"Permission {permission.name} created by user {actor.id}")
        return permission

    def update_permission(
        self,
        actor: Subject,
        permission_id: int,
        *,
        name: Optional[str] = None,
        display_name: Optional[str] = None,
        description: Optional[str] = _UNSET,
        group: Optional[str] = _UNSET,
    ) -> Permission:
        permission = self.get_permission(permission_id)
        gate.authorize(actor, "permissions.update", permission)

        if name is not None and name != permission.name:
            self._check_permission_name(name, exclude_id=permission.id)
            permission.name = name
        if display_name is not None:
            permission.display_name = display_name
        if description is not _UNSET:
            permission.description = description
        if group is not _UNSET:
            permission.group = group

        self.db.commit()
        self.db.refresh(permission)
        logger.info(f"Permission {permission.name} updated by user {actor.id}")
        return permission

    def delete_permission(self, actor: Subject, permission_id: int) -> None:
        permission = self.get_permission(permission_id)
        gate.authorize(actor, "permissions.delete", permission)

        if permission.roles:
            raise ConflictError(
                "Cannot delete permission that is assigned to roles",
                details={"roles_count": len(permission.roles)},
            )

        permission.soft_delete()
        self.db.commit()
        logger.info(f"Permission {permission.name} deleted by user {actor.id}")

    def restore_permission(self, actor: Subject, permission_id: int) -> Permission:
        permission = self._trashed(Permission, permission_id)
        gate.authorize(actor, "permissions.restore", permission)
        permission.restore()
        self.db.commit()
        self.db.refresh(permission)
        logger.info(f"Permission {permission.name} restored by user {actor.id}")
        return permission

    def force_delete_permission(self, actor: Subject, permission_id: int) -> None:
        permission = self.get_permission(permission_id, with_trashed=True)
        gate.authorize(actor, "permissions.force_delete", permission)

        if permission.roles:
            raise ConflictError(
                "Cannot delete permission that is assigned to roles",
                details={"roles_count": len(permission.roles)},
            )

        name = permission.name
        self.db.delete(permission)
        self.db.commit()
        logger.info(f"Permission {name} permanently deleted by user {actor.id}")

    def _check_permission_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        if not is_valid_permission_name(name):
            raise ValidationError.for_field(
                "name", "The name may only contain lowercase letters, numbers, dots, hyphens and underscores."
            )
        query = self.db.query(Permission).filter(Permission.name == name)
        if exclude_id is not None:
            query = query.filter(Permission.id != exclude_id)
        if query.first() is not None:
            raise ValidationError.for_field("name", "The name has already been taken.")

    # ------------------------------------------------------------------
    # User roles
    # ------------------------------------------------------------------

    def assign_role(self, actor: Subject, user_id: int, role_ids: Iterable[int]) -> User:
        """Attach roles to a user; roles already held are left as they are."""
        user = self.get_user(user_id)
        gate.authorize(actor, "user_roles.assign_role", resolve_subject(user))

        roles = self._load_by_ids(Role, role_ids, "role_ids")
        held = {r.id for r in user.roles}
        for role in roles:
            if role.id not in held:
                user.roles.append(role)
                held.add(role.id)

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Roles {[r.name for r in roles]} assigned to user {user.id} by user {actor.id}")
        return user

    def remove_role(self, actor: Subject, user_id: int, role_id: int) -> User:
        user = self.get_user(user_id)
        gate.authorize(actor, "user_roles.remove_role", resolve_subject(user))

        role = self.get_role(role_id)
        if role in user.roles:
            user.roles.remove(role)

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Role {role.name} removed from user {user.id} by user {actor.id}")
        return user

    def sync_roles(self, actor: Subject, user_id: int, role_ids: Iterable[int]) -> User:
        """Replace a user's roles with exactly ``role_ids``."""
        user = self.get_user(user_id)
        gate.authorize(actor, "user_roles.sync_roles", resolve_subject(user))

        user.roles = self._load_by_ids(Role, role_ids, "role_ids")

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Roles of user {user.id} synced by user {actor.id}")
        return user

    # ------------------------------------------------------------------

    def _load_by_ids(self, model, ids: Iterable[int], field: str) -> list:
        """Load rows by id, preserving request order and dropping duplicates."""
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        rows = {
            row.id: row for row in self.db.query(model).filter(model.id.in_(wanted), model.active()).all()
        }
        missing = [i for i in wanted if i not in rows]
        if missing:
            raise ValidationError(
                {f"{field}.{wanted.index(i)}": [f"The selected {field} is invalid."] for i in missing}
            )
        return [rows[i] for i in wanted]

    def _trashed(self, model, row_id: int):
        row = self.db.get(model, row_id)
        if row is None or not row.trashed:
            raise NotFoundError(f"No trashed {model.__tablename__} row {row_id}")
        return row
