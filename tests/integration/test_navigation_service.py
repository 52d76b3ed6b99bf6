"""Tests for menu and content administration and lookups."""

import pytest

from hub.core.errors import AuthorizationDenied, ConflictError, NotFoundError, ValidationError
from hub.db.models import Content, Menu
from hub.services.navigation import NavigationService


def _flat(nested):
    return [(e["item"].name, _flat(e["children"])) for e in nested]


@pytest.fixture
def service(seeded_db):
    return NavigationService(seeded_db)


class TestMenuTree:
    """Test the per-user navigation tree."""

    def test_plain_user(self, service, menu_rows, plain_user, actor_of):
        """analytics.view opens Reports; Sales needs export, Traffic is open."""
        tree = service.menu_tree(actor_of(plain_user))
        assert _flat(tree.to_nested()) == [
            ("Dashboard", []),
            ("Reports", [("Traffic", [])]),
        ]

    def test_analyst_sees_sales(self, service, menu_rows, make_user, actor_of):
        analyst = make_user("erin", "analyst")
        tree = service.menu_tree(actor_of(analyst))
        assert _flat(tree.to_nested()) == [
            ("Dashboard", []),
            ("Reports", [("Sales", [("Monthly", [])]), ("Traffic", [])]),
        ]

    def test_admin_role_requirement(self, service, menu_rows, admin_user, actor_of):
        """Admin opens the Admin group by role and Users by permission."""
        tree = service.menu_tree(actor_of(admin_user))
        top = [e["item"].name for e in tree.to_nested()]
        assert top == ["Dashboard", "Reports", "Admin"]
        assert tree.children(menu_rows["admin"].id)[0].name == "Users"

    def test_full_tree_requires_permission(self, service, menu_rows, admin_user, plain_user, actor_of):
        assert len(service.full_tree(actor_of(admin_user))) == 7
        with pytest.raises(AuthorizationDenied):
            service.full_tree(actor_of(plain_user))


class TestReorder:
    """Test moving and reordering menu items."""

    def test_reorder(self, service, seeded_db, menu_rows, admin_user, actor_of):
        service.reorder(actor_of(admin_user), [
            {"id": menu_rows["admin"].id, "order": 0},
            {"id": menu_rows["dashboard"].id, "order": 5},
        ])
        tree = service.full_tree(actor_of(admin_user))
        assert [e["item"].name for e in tree.to_nested()] == ["Admin", "Reports", "Dashboard"]

    def test_reparent(self, service, seeded_db, menu_rows, admin_user, actor_of):
        sales = menu_rows["sales"]
        service.reorder(actor_of(admin_user), [{"id": sales.id, "order": 0, "parent_id": None}])
        assert seeded_db.get(Menu, sales.id).parent_id is None

    def test_order_only_keeps_parent(self, service, seeded_db, menu_rows, admin_user, actor_of):
        """An entry without parent_id moves within its current parent."""
        traffic = menu_rows["traffic"]
        service.reorder(actor_of(admin_user), [{"id": traffic.id, "order": 5}])
        seeded_db.refresh(traffic)
        assert traffic.parent_id == menu_rows["reports"].id
        assert traffic.order == 5

    def test_cycle_rejected(self, service, seeded_db, menu_rows, admin_user, actor_of):
        """Moving an item under its own descendant is refused and nothing changes."""
        actor = actor_of(admin_user)
        reports, sales = menu_rows["reports"], menu_rows["sales"]
        with pytest.raises(ValidationError) as exc_info:
            service.reorder(actor, [{"id": reports.id, "order": 1, "parent_id": sales.id}])
        assert "items.0.parent_id" in exc_info.value.errors
        assert seeded_db.get(Menu, reports.id).parent_id is None
        assert len(service.full_tree(actor)) == 7

    def test_cycle_across_entries_rejected(self, service, menu_rows, admin_user, actor_of):
        """Two moves that are fine alone but loop together are refused."""
        dashboard, admin = menu_rows["dashboard"], menu_rows["admin"]
        with pytest.raises(ValidationError) as exc_info:
            service.reorder(actor_of(admin_user), [
                {"id": dashboard.id, "order": 0, "parent_id": admin.id},
                {"id": admin.id, "order": 0, "parent_id": dashboard.id},
            ])
        assert "items.0.parent_id" in exc_info.value.errors

    def test_move_under_sibling_allowed(self, service, seeded_db, menu_rows, admin_user, actor_of):
        traffic, sales = menu_rows["traffic"], menu_rows["sales"]
        service.reorder(actor_of(admin_user), [{"id": traffic.id, "order": 1, "parent_id": sales.id}])
        assert seeded_db.get(Menu, traffic.id).parent_id == sales.id

    def test_own_parent_rejected(self, service, menu_rows, admin_user, actor_of):
        menu_id = menu_rows["sales"].id
        with pytest.raises(ValidationError):
            service.reorder(actor_of(admin_user), [{"id": menu_id, "order": 0, "parent_id": menu_id}])

    def test_unknown_id(self, service, menu_rows, admin_user, actor_of):
        with pytest.raises(ValidationError) as exc_info:
            service.reorder(actor_of(admin_user), [{"id": 9999, "order": 0}])
        assert "items.0.id" in exc_info.value.errors

    def test_requires_permission(self, service, menu_rows, plain_user, actor_of):
        with pytest.raises(AuthorizationDenied):
            service.reorder(actor_of(plain_user), [{"id": menu_rows["dashboard"].id, "order": 1}])


class TestContent:
    """Test content listing and lookup."""

    @pytest.fixture
    def page(self, seeded_db):
        content = Content(title="Handbook", slug="handbook", type="custom", custom_content="<p>Hi</p>")
        seeded_db.add(content)
        seeded_db.commit()
        return content

    def test_admin_lists_content(self, service, page, admin_user, actor_of):
        assert [c.slug for c in service.list_content(actor_of(admin_user))] == ["handbook"]

    def test_plain_user_denied(self, service, page, plain_user, actor_of):
        with pytest.raises(AuthorizationDenied):
            service.list_content(actor_of(plain_user))

    def test_get_by_slug(self, service, page, admin_user, actor_of):
        assert service.get_content(actor_of(admin_user), "handbook").title == "Handbook"
        with pytest.raises(NotFoundError):
            service.get_content(actor_of(admin_user), "missing")


class TestMenuCrud:
    """Test creating, updating and deleting menu items."""

    def test_default_order_after_last_sibling(self, service, menu_rows, admin_user, actor_of):
        actor = actor_of(admin_user)
        root = service.create_menu(actor, name="Help", type="list_menu")
        assert root.order == 3
        child = service.create_menu(actor, name="Funnels", type="list_menu", parent_id=menu_rows["reports"].id)
        assert child.order == 2

    def test_first_child_order(self, service, menu_rows, admin_user, actor_of):
        menu = service.create_menu(
            actor_of(admin_user), name="Daily", type="list_menu", parent_id=menu_rows["traffic"].id
        )
        assert menu.order == 1

    def test_explicit_order_kept(self, service, menu_rows, admin_user, actor_of):
        menu = service.create_menu(actor_of(admin_user), name="Help", type="list_menu", order=0)
        assert menu.order == 0

    def test_content_menu_needs_content(self, service, admin_user, actor_of):
        with pytest.raises(ValidationError) as exc_info:
            service.create_menu(actor_of(admin_user), name="Handbook", type="content_menu")
        assert "content_id" in exc_info.value.errors

    def test_content_menu_links_content(self, service, admin_user, actor_of):
        actor = actor_of(admin_user)
        page = service.create_content(actor, title="Handbook", type="custom", custom_content="<p>Hi</p>")
        menu = service.create_menu(actor, name="Handbook", type="content_menu", content_id=page.id)
        assert menu.content.slug == "handbook"

    def test_unknown_parent(self, service, admin_user, actor_of):
        with pytest.raises(ValidationError) as exc_info:
            service.create_menu(actor_of(admin_user), name="Lost", type="list_menu", parent_id=9999)
        assert "parent_id" in exc_info.value.errors

    def test_plain_user_cannot_create(self, service, plain_user, actor_of):
        with pytest.raises(AuthorizationDenied):
            service.create_menu(actor_of(plain_user), name="Mine", type="list_menu")

    def test_update_clears_icon(self, service, seeded_db, menu_rows, admin_user, actor_of):
        actor = actor_of(admin_user)
        dashboard = menu_rows["dashboard"]
        service.update_menu(actor, dashboard.id, icon="fa-home")
        menu = service.update_menu(actor, dashboard.id, name="Home")
        assert menu.icon == "fa-home"
        menu = service.update_menu(actor, dashboard.id, icon=None)
        assert menu.icon is None
        assert menu.name == "Home"

    def test_update_reparent_cycle_rejected(self, service, menu_rows, admin_user, actor_of):
        with pytest.raises(ValidationError) as exc_info:
            service.update_menu(actor_of(admin_user), menu_rows["reports"].id, parent_id=menu_rows["sales"].id)
        assert "parent_id" in exc_info.value.errors

    def test_update_own_parent_rejected(self, service, menu_rows, admin_user, actor_of):
        sales = menu_rows["sales"]
        with pytest.raises(ValidationError):
            service.update_menu(actor_of(admin_user), sales.id, parent_id=sales.id)

    def test_delete_with_children_conflicts(self, service, menu_rows, admin_user, actor_of):
        with pytest.raises(ConflictError) as exc_info:
            service.delete_menu(actor_of(admin_user), menu_rows["reports"].id)
        assert exc_info.value.details == {"children_count": 2}

    def test_delete_leaf_trashes_it(self, service, seeded_db, menu_rows, admin_user, actor_of):
        actor = actor_of(admin_user)
        traffic = menu_rows["traffic"]
        service.delete_menu(actor, traffic.id)
        assert seeded_db.get(Menu, traffic.id).trashed
        assert len(service.full_tree(actor)) == 6
        with pytest.raises(NotFoundError):
            service.get_menu(traffic.id)

    def test_restore(self, service, menu_rows, admin_user, actor_of):
        actor = actor_of(admin_user)
        traffic = menu_rows["traffic"]
        service.delete_menu(actor, traffic.id)
        service.restore_menu(actor, traffic.id)
        assert len(service.full_tree(actor)) == 7

    def test_restore_under_trashed_parent_conflicts(self, service, menu_rows, admin_user, actor_of):
        actor = actor_of(admin_user)
        admin, users = menu_rows["admin"], service.full_tree(actor).children(menu_rows["admin"].id)[0]
        service.delete_menu(actor, users.id)
        service.delete_menu(actor, admin.id)
        with pytest.raises(ConflictError):
            service.restore_menu(actor, users.id)

    def test_force_delete(self, service, seeded_db, menu_rows, admin_user, actor_of):
        actor = actor_of(admin_user)
        dashboard_id = menu_rows["dashboard"].id
        service.force_delete_menu(actor, dashboard_id)
        assert seeded_db.get(Menu, dashboard_id) is None

    def test_force_delete_needs_manage(self, service, menu_rows, subject):
        """menus.delete alone does not allow a permanent delete."""
        actor = subject(permissions=["menus.delete"])
        service.delete_menu(actor, menu_rows["traffic"].id)
        with pytest.raises(AuthorizationDenied):
            service.force_delete_menu(actor, menu_rows["traffic"].id)


class TestContentCrud:
    """Test content administration."""

    def _create(self, service, actor, title="Handbook", **fields):
        fields.setdefault("custom_content", "<p>Hi</p>")
        return service.create_content(actor, title=title, type="custom", **fields)

    def test_create_records_creator(self, service, admin_user, actor_of):
        page = self._create(service, actor_of(admin_user))
        assert page.slug == "handbook"
        assert page.created_by_user_id == admin_user.id
        assert page.updated_by_user_id == admin_user.id
        assert page.published_at is None

    def test_generated_slugs_are_unique(self, service, admin_user, actor_of):
        actor = actor_of(admin_user)
        slugs = [self._create(service, actor, title="Sales Report").slug for _ in range(3)]
        assert slugs == ["sales-report", "sales-report-1", "sales-report-2"]

    def test_explicit_slug_taken(self, service, admin_user, actor_of):
        actor = actor_of(admin_user)
        self._create(service, actor)
        with pytest.raises(ValidationError) as exc_info:
            self._create(service, actor, title="Other", slug="handbook")
        assert "slug" in exc_info.value.errors

    def test_custom_type_needs_body(self, service, admin_user, actor_of):
        with pytest.raises(ValidationError) as exc_info:
            self._create(service, actor_of(admin_user), custom_content=None)
        assert "custom_content" in exc_info.value.errors

    def test_update_records_updater(self, service, admin_user, super_admin_user, actor_of):
        page = self._create(service, actor_of(admin_user))
        page = service.update_content(actor_of(super_admin_user), page.id, title="Staff Handbook")
        assert page.slug == "staff-handbook"
        assert page.created_by_user_id == admin_user.id
        assert page.updated_by_user_id == super_admin_user.id

    def test_update_keeps_explicit_slug(self, service, admin_user, actor_of):
        actor = actor_of(admin_user)
        page = self._create(service, actor)
        page = service.update_content(actor, page.id, title="Staff Handbook", slug="staff")
        assert page.slug == "staff"

    def test_publish(self, service, admin_user, actor_of):
        actor = actor_of(admin_user)
        page = self._create(service, actor)
        assert service.publish_content(actor, page.id).published_at is not None
        assert service.publish_content(actor, page.id, published=False).published_at is None

    def test_publish_requires_permission(self, service, admin_user, make_user, actor_of):
        page = self._create(service, actor_of(admin_user))
        analyst = make_user("erin", "analyst")
        with pytest.raises(AuthorizationDenied):
            service.publish_content(actor_of(analyst), page.id)

    def test_delete_linked_conflicts(self, service, admin_user, actor_of):
        actor = actor_of(admin_user)
        page = self._create(service, actor)
        service.create_menu(actor, name="Handbook", type="content_menu", content_id=page.id)
        with pytest.raises(ConflictError) as exc_info:
            service.delete_content(actor, page.id)
        assert exc_info.value.details == {"linked_menus_count": 1}

    def test_delete_restore_force_delete(self, service, seeded_db, admin_user, actor_of):
        actor = actor_of(admin_user)
        page = self._create(service, actor)
        service.delete_content(actor, page.id)
        assert service.list_content(actor) == []
        with pytest.raises(NotFoundError):
            service.get_content(actor, "handbook")

        service.restore_content(actor, page.id)
        assert service.get_content(actor, "handbook").id == page.id

        service.force_delete_content(actor, page.id)
        assert seeded_db.get(Content, page.id) is None
