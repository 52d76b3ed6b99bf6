"""Database seeding for the Analytics Hub.

Creates the permission registry rows and the default roles.
"""

from typing import Dict

from sqlalchemy.orm import Session

from hub.common.logger import get_logger
from hub.core.rbac.permissions import PERMISSION_DEFINITIONS, Permission as PermissionDef
from hub.core.rbac.roles import DEFAULT_ROLES
from hub.db.models import Permission, Role

logger = get_logger("db.seed")


def permission_display_name(perm: PermissionDef) -> str:
    """Human label for a registered permission, e.g. 'Force Delete Roles'."""
    action = perm.action.value.replace("_", " ").title()
    resource = perm.resource.value.replace("_", " ").replace("-", " ").title()
    return f"{action} {resource}"


def seed_permissions(db: Session) -> Dict[str, Permission]:
    """
    Create a row for every registered permission.

    Idempotent - existing rows are returned unchanged.

    Args:
        db: Database session

    Returns:
        Dict mapping permission name to Permission row
    """
    existing = {p.name: p for p in db.query(Permission).all()}
    created = 0

    for name, perm in PERMISSION_DEFINITIONS.items():
        if name in existing:
            continue
        row = Permission(
            name=name,
            display_name=permission_display_name(perm),
            description=f"Allows to {perm.action.value.replace('_', ' ')} {perm.resource.value}",
            group=perm.group,
        )
        db.add(row)
        existing[name] = row
        created += 1

    db.flush()
    logger.info(f"Seeded {created} permission(s)")
    return existing


def seed_default_roles(db: Session) -> Dict[str, Role]:
    """
    Create the 6 default roles and attach their permissions.

    Roles are idempotent - if they already exist, the existing role is
    returned and its permission set is left untouched.

    Args:
        db: Database session

    Returns:
        Dict mapping role name to Role object
    """
    permissions = seed_permissions(db)
    created_roles = {}

    for role_name, role_config in DEFAULT_ROLES.items():
        existing = db.query(Role).filter(Role.name == role_name).first()
        if existing:
            created_roles[role_name] = existing
            continue

        role = Role(
            name=role_name,
            display_name=role_config["display_name"],
            description=role_config["description"],
            color=role_config["color"],
            is_system=role_config["is_system"],
        )
        role.permissions = [permissions[name] for name in role_config["permissions"]]
        db.add(role)
        created_roles[role_name] = role
        logger.info(f"Created role {role_name} with {len(role.permissions)} permission(s)")

    db.flush()
    return created_roles


def seed_rbac(db: Session) -> Dict[str, Role]:
    """Seed permissions and default roles, then commit."""
    roles = seed_default_roles(db)
    db.commit()
    return roles


def get_role_by_name(db: Session, name: str):
    """Get a role by its machine name."""
    return db.query(Role).filter(Role.name == name).first()


if __name__ == "__main__":
    from hub.common.logger import setup_logger
    from hub.db.base import Base
    from hub.db.session import SessionLocal, engine

    setup_logger()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_rbac(db)
    finally:
        db.close()
