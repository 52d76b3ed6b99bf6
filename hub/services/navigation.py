"""Menu and content administration, and lookups scoped to what an actor may see.

Menus and content are soft-deleted: ``delete_*`` stamps ``deleted_at``,
``restore_*`` clears it and ``force_delete_*`` removes the row. Trashed rows
never appear in trees, listings or lookups.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from slugify import slugify
from sqlalchemy import func
from sqlalchemy.orm import Session

from hub.common.logger import get_logger
from hub.core.errors import ConflictError, NotFoundError, ValidationError
from hub.core.hierarchy import MenuTree, filter_accessible
from hub.core.rbac import gate
from hub.core.rbac.subject import Subject
from hub.db.models import Content, Menu

logger = get_logger("services.navigation")

MENU_TYPES = ("list_menu", "content_menu")
CONTENT_TYPES = ("custom", "embed_url")


class NavigationService:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Trees
    # ------------------------------------------------------------------

    def _active_menus(self) -> List[Menu]:
        return self.db.query(Menu).filter(Menu.active()).order_by(Menu.order, Menu.id).all()

    def menu_tree(self, actor: Optional[Subject]) -> MenuTree:
        """Build the menu tree the actor can see."""
        return filter_accessible(self._active_menus(), actor)

    def full_tree(self, actor: Subject) -> MenuTree:
        """Unfiltered tree for menu administrators."""
        gate.authorize(actor, "menus.view_any")
        return MenuTree.from_items(self._active_menus())

    # ------------------------------------------------------------------
    # Menus
    # ------------------------------------------------------------------

    def get_menu(self, menu_id: int, with_trashed: bool = False) -> Menu:
        menu = self.db.get(Menu, menu_id)
        if menu is None or (menu.trashed and not with_trashed):
            raise NotFoundError(f"Menu {menu_id} not found")
        return menu

    def create_menu(
        self,
        actor: Subject,
        *,
        name: str,
        type: str = "list_menu",
        parent_id: Optional[int] = None,
        icon: Optional[str] = None,
        route_or_url: Optional[str] = None,
        content_id: Optional[int] = None,
        order: Optional[int] = None,
        role_permissions_required: Optional[List[str]] = None,
    ) -> Menu:
        """
        Create a menu item.

        Without an explicit ``order`` the item goes after its last sibling.

        Raises:
            AuthorizationDenied: If the actor may not create menus
            ValidationError: On an unknown type, parent or content, or a
                content menu without content
        """
        gate.authorize(actor, "menus.create")
        self._check_menu_links(type, parent_id, content_id)

        if order is None:
            highest = (
                self.db.query(func.max(Menu.order))
                .filter(Menu.parent_id.is_(None) if parent_id is None else Menu.parent_id == parent_id)
                .filter(Menu.active())
                .scalar()
            )
            order = (highest or 0) + 1

        menu = Menu(
            name=name,
            type=type,
            parent_id=parent_id,
            icon=icon,
            route_or_url=route_or_url,
            content_id=content_id,
            order=order,
            role_permissions_required=list(role_permissions_required or []),
        )
        self.db.add(menu)
        self.db.commit()
        self.db.refresh(menu)
        logger.info(f"Menu {menu.id} ({menu.name}) created by user {actor.id}")
        return menu

    def update_menu(self, actor: Subject, menu_id: int, **changes: Any) -> Menu:
        """
        Update the fields present in ``changes``.

        A key that is present with ``None`` clears a nullable field; a key
        that is absent leaves the field as it is.
        """
        menu = self.get_menu(menu_id)
        gate.authorize(actor, "menus.update", menu)

        menu_type = changes.get("type", menu.type)
        parent_id = changes.get("parent_id", menu.parent_id)
        content_id = changes.get("content_id", menu.content_id)

        if "parent_id" in changes and parent_id is not None:
            if parent_id == menu.id:
                raise ValidationError.for_field("parent_id", "A menu item cannot be its own parent.")
        self._check_menu_links(menu_type, parent_id, content_id)
        if "parent_id" in changes and parent_id is not None:
            parents = self._parent_map()
            parents[menu.id] = parent_id
            if _creates_cycle(parents, menu.id):
                raise ValidationError.for_field("parent_id", "Moving the menu item there would create a cycle.")

        for field in ("name", "type", "parent_id", "icon", "route_or_url", "content_id", "order"):
            if field in changes:
                setattr(menu, field, changes[field])
        if "role_permissions_required" in changes:
            menu.role_permissions_required = list(changes["role_permissions_required"] or [])

        self.db.commit()
        self.db.refresh(menu)
        logger.info(f"Menu {menu.id} updated by user {actor.id}")
        return menu

    def delete_menu(self, actor: Subject, menu_id: int) -> None:
        """Trash a menu item. Refused while it still has children."""
        menu = self.get_menu(menu_id)
        gate.authorize(actor, "menus.delete", menu)

        children = self.db.query(Menu).filter(Menu.parent_id == menu.id, Menu.active()).count()
        if children:
            raise ConflictError(
                "Cannot delete menu with child items. Delete or move the child items first.",
                details={"children_count": children},
            )

        menu.soft_delete()
        self.db.commit()
        logger.info(f"Menu {menu.id} deleted by user {actor.id}")

    def restore_menu(self, actor: Subject, menu_id: int) -> Menu:
        menu = self._trashed(Menu, menu_id)
        gate.authorize(actor, "menus.restore", menu)
        if menu.parent is not None and menu.parent.trashed:
            raise ConflictError("Restore the parent menu item first", details={"parent_id": menu.parent_id})

        menu.restore()
        self.db.commit()
        self.db.refresh(menu)
        logger.info(f"Menu {menu.id} restored by user {actor.id}")
        return menu

    def force_delete_menu(self, actor: Subject, menu_id: int) -> None:
        menu = self.get_menu(menu_id, with_trashed=True)
        gate.authorize(actor, "menus.force_delete", menu)

        # Trashed children count too; the foreign key would cascade to them
        children = self.db.query(Menu).filter(Menu.parent_id == menu.id).count()
        if children:
            raise ConflictError(
                "Cannot delete menu with child items. Delete or move the child items first.",
                details={"children_count": children},
            )

        self.db.delete(menu)
        self.db.commit()
        logger.info(f"Menu {menu_id} permanently deleted by user {actor.id}")

    def reorder(self, actor: Subject, entries: Iterable[Dict]) -> None:
        """
        Apply new positions, and new parents where given, to menu items.

        An entry without a ``parent_id`` key keeps its parent; an explicit
        ``None`` moves the item to the top level.

        Args:
            actor: Subject performing the reorder
            entries: Items with ``id``, ``order`` and optional ``parent_id``

        Raises:
            AuthorizationDenied: If the actor may not reorder menus
            ValidationError: If an id is unknown or a move would put an item
                under itself or one of its descendants
        """
        gate.authorize(actor, "menus.reorder")

        entries = list(entries)
        ids = {entry["id"] for entry in entries}
        ids.update(entry["parent_id"] for entry in entries if entry.get("parent_id") is not None)
        menus = {m.id: m for m in self.db.query(Menu).filter(Menu.id.in_(ids), Menu.active()).all()}

        for i, entry in enumerate(entries):
            if entry["id"] not in menus:
                raise ValidationError.for_field(f"items.{i}.id", "The selected id is invalid.")
            parent_id = entry.get("parent_id")
            if parent_id is not None and parent_id not in menus:
                raise ValidationError.for_field(f"items.{i}.parent_id", "The selected parent_id is invalid.")
            if parent_id == entry["id"]:
                raise ValidationError.for_field(f"items.{i}.parent_id", "A menu item cannot be its own parent.")

        parents = self._parent_map()
        for entry in entries:
            if "parent_id" in entry:
                parents[entry["id"]] = entry["parent_id"]
        for i, entry in enumerate(entries):
            if entry.get("parent_id") is not None and _creates_cycle(parents, entry["id"]):
                raise ValidationError.for_field(
                    f"items.{i}.parent_id", "Moving the menu item there would create a cycle."
                )

        for entry in entries:
            menu = menus[entry["id"]]
            menu.order = entry["order"]
            if "parent_id" in entry:
                menu.parent_id = entry["parent_id"]

        self.db.commit()
        logger.info(f"{len(entries)} menu item(s) reordered by user {actor.id}")

    def _parent_map(self) -> Dict[int, Optional[int]]:
        rows = self.db.query(Menu.id, Menu.parent_id).filter(Menu.active()).all()
        return {menu_id: parent_id for menu_id, parent_id in rows}

    def _check_menu_links(self, menu_type: str, parent_id: Optional[int], content_id: Optional[int]) -> None:
        if menu_type not in MENU_TYPES:
            raise ValidationError.for_field("type", "The selected type is invalid.")
        if menu_type == "content_menu" and content_id is None:
            raise ValidationError.for_field("content_id", "Content ID is required for content menu type.")
        if parent_id is not None:
            parent = self.db.get(Menu, parent_id)
            if parent is None or parent.trashed:
                raise ValidationError.for_field("parent_id", "The selected parent_id is invalid.")
        if content_id is not None:
            content = self.db.get(Content, content_id)
            if content is None or content.trashed:
                raise ValidationError.for_field("content_id", "The selected content_id is invalid.")

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def list_content(self, actor: Subject) -> List[Content]:
        gate.authorize(actor, "content.view_any")
        items = self.db.query(Content).filter(Content.active()).order_by(Content.title).all()
        return [c for c in items if c.is_accessible_by(actor)]

    def get_content(self, actor: Subject, slug: str) -> Content:
        content = self.db.query(Content).filter(Content.slug == slug, Content.active()).first()
        if content is None:
            raise NotFoundError(f"Content {slug} not found")
        gate.authorize(actor, "content.view", content)
        return content

    def find_content(self, content_id: int, with_trashed: bool = False) -> Content:
        content = self.db.get(Content, content_id)
        if content is None or (content.trashed and not with_trashed):
            raise NotFoundError(f"Content {content_id} not found")
        return content

    def create_content(
        self,
        actor: Subject,
        *,
        title: str,
        type: str = "custom",
        slug: Optional[str] = None,
        custom_content: Optional[str] = None,
    ) -> Content:
        """
        Create a content page owned by the actor.

        Without a slug, one is derived from the title and suffixed
        (``-1``, ``-2``, ...) until it is free.
        """
        gate.authorize(actor, "content.create")
        self._check_content_body(type, custom_content)

        if slug:
            self._check_slug(slug)
        else:
            slug = self._unique_slug(title)

        content = Content(
            title=title,
            slug=slug,
            type=type,
            custom_content=custom_content,
            created_by_user_id=actor.id,
            updated_by_user_id=actor.id,
        )
        self.db.add(content)
        self.db.commit()
        self.db.refresh(content)
        logger.info(f"Content {content.slug} created by user {actor.id}")
        return content

    def update_content(self, actor: Subject, content_id: int, **changes: Any) -> Content:
        """
        Update the fields present in ``changes`` and record the actor as updater.

        A new title without a slug regenerates the slug from the title.
        """
        content = self.find_content(content_id)
        gate.authorize(actor, "content.update", content)

        self._check_content_body(
            changes.get("type", content.type), changes.get("custom_content", content.custom_content)
        )

        slug = changes.pop("slug", None)
        if slug:
            if slug != content.slug:
                self._check_slug(slug, exclude_id=content.id)
            content.slug = slug
        elif "title" in changes and changes["title"] != content.title:
            content.slug = self._unique_slug(changes["title"], exclude_id=content.id)

        for field in ("title", "type", "custom_content"):
            if field in changes:
                setattr(content, field, changes[field])
        content.updated_by_user_id = actor.id

        self.db.commit()
        self.db.refresh(content)
        logger.info(f"Content {content.slug} updated by user {actor.id}")
        return content

    def publish_content(self, actor: Subject, content_id: int, published: bool = True) -> Content:
        """Set or clear the publication timestamp."""
        content = self.find_content(content_id)
        gate.authorize(actor, "content.publish", content)

        content.published_at = datetime.utcnow() if published else None
        content.updated_by_user_id = actor.id
        self.db.commit()
        self.db.refresh(content)
        logger.info(f"Content {content.slug} {'published' if published else 'unpublished'} by user {actor.id}")
        return content

    def delete_content(self, actor: Subject, content_id: int) -> None:
        """Trash a content page. Refused while a menu item links to it."""
        content = self.find_content(content_id)
        gate.authorize(actor, "content.delete", content)

        linked = self.db.query(Menu).filter(Menu.content_id == content.id, Menu.active()).count()
        if linked:
            raise ConflictError(
                "Cannot delete content that is linked to menu items. Unlink it from the menus first.",
                details={"linked_menus_count": linked},
            )

        content.soft_delete()
        self.db.commit()
        logger.info(f"Content {content.slug} deleted by user {actor.id}")

    def restore_content(self, actor: Subject, content_id: int) -> Content:
        content = self._trashed(Content, content_id)
        gate.authorize(actor, "content.restore", content)
        content.restore()
        self.db.commit()
        self.db.refresh(content)
        logger.info(f"Content {content.slug} restored by user {actor.id}")
        return content

    def force_delete_content(self, actor: Subject, content_id: int) -> None:
        content = self.find_content(content_id, with_trashed=True)
        gate.authorize(actor, "content.force_delete", content)

        linked = self.db.query(Menu).filter(Menu.content_id == content.id, Menu.active()).count()
        if linked:
            raise ConflictError(
                "Cannot delete content that is linked to menu items. Unlink it from the menus first.",
                details={"linked_menus_count": linked},
            )

        slug = content.slug
        self.db.delete(content)
        self.db.commit()
        logger.info(f"Content {slug} permanently deleted by user {actor.id}")

    @staticmethod
    def _check_content_body(content_type: str, custom_content: Optional[str]) -> None:
        if content_type not in CONTENT_TYPES:
            raise ValidationError.for_field("type", "The selected type is invalid.")
        if content_type == "custom" and not custom_content:
            raise ValidationError.for_field(
                "custom_content", "The custom content field is required when type is custom."
            )

    def _check_slug(self, slug: str, exclude_id: Optional[int] = None) -> None:
        # Trashed pages keep their slug until force-deleted
        query = self.db.query(Content).filter(Content.slug == slug)
        if exclude_id is not None:
            query = query.filter(Content.id != exclude_id)
        if query.first() is not None:
            raise ValidationError.for_field("slug", "The slug has already been taken.")

    def _unique_slug(self, title: str, exclude_id: Optional[int] = None) -> str:
        base = slugify(title) or "content"
        candidate, counter = base, 1
        while True:
            query = self.db.query(Content.id).filter(Content.slug == candidate)
            if exclude_id is not None:
                query = query.filter(Content.id != exclude_id)
            if query.first() is None:
                return candidate
            candidate = f"{base}-{counter}"
            counter += 1

    # ------------------------------------------------------------------

    def _trashed(self, model, row_id: int):
        row = self.db.get(model, row_id)
        if row is None or not row.trashed:
            raise NotFoundError(f"No trashed {model.__tablename__} row {row_id}")
        return row


def _creates_cycle(parents: Dict[int, Optional[int]], menu_id: int) -> bool:
    """True if walking up from ``menu_id`` never reaches a root."""
    seen = set()
    current = parents.get(menu_id)
    while current is not None:
        if current == menu_id or current in seen:
            return True
        seen.add(current)
        current = parents.get(current)
    return False
