"""Per-item visibility rules for menus and content."""

from typing import Any, Iterable, Optional

from .tree import Accessor, MenuTree, _accessor


def menu_is_accessible(requirements: Optional[Iterable[str]], subject) -> bool:
    """
    Check a single menu item's requirement list against a subject.

    An empty (or missing) list means the item is visible to every
    authenticated user. Otherwise any one entry suffices, matched either as
    a held permission name or as a held role name.
    """
    if subject is None:
        return False
    requirements = list(requirements or [])
    if not requirements:
        return True
    return any(subject.has_permission(r) or subject.has_role(r) for r in requirements)


def content_is_accessible(content: Any, subject) -> bool:
    # Reachability is decided by the menu entry that points at the content
    return True


def filter_accessible(
    items: Iterable[Any],
    subject,
    *,
    key: Accessor = "id",
    parent_key: Accessor = "parent_id",
    order: Accessor = "order",
    requirements: Accessor = "role_permissions_required",
) -> MenuTree:
    """
    Build the menu tree and prune what the subject cannot see.

    Items exposing ``is_accessible_by`` (Menu rows) decide for themselves;
    plain records are checked against their ``requirements`` field.

    Returns:
        Filtered MenuTree; use ``to_nested`` to serialize it
    """
    tree = MenuTree.from_items(items, key=key, parent_key=parent_key, order=order)
    get_requirements = _accessor(requirements)

    def accessible(item: Any) -> bool:
        check = getattr(item, "is_accessible_by", None)
        if callable(check):
            return check(subject)
        return menu_is_accessible(get_requirements(item), subject)

    return tree.filter(accessible)
