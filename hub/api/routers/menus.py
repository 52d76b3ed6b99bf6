"""Navigation menu API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hub.api.deps import authorize, get_db, get_subject
from hub.api.schemas.common import SuccessResponse
from hub.api.schemas.rbac import MenuCreate, MenuNode, MenuReorderRequest, MenuResponse, MenuUpdate
from hub.core.hierarchy import MenuTree
from hub.core.rbac.subject import Subject
from hub.db.models import Menu
from hub.services.navigation import NavigationService

router = APIRouter(prefix="/menus", tags=["menus"])


def _menu_fields(menu: Menu) -> dict:
    return {
        "id": menu.id,
        "name": menu.name,
        "type": menu.type,
        "icon": menu.icon,
        "route_or_url": menu.route_or_url,
        "content_id": menu.content_id,
        "order": menu.order,
    }


def _to_nodes(tree: MenuTree) -> List[MenuNode]:
    roots: List[MenuNode] = []
    stack = [(idx, roots) for idx in reversed(tree.roots)]
    while stack:
        idx, sink = stack.pop()
        node = MenuNode(**_menu_fields(tree.nodes[idx].item))
        sink.append(node)
        stack.extend((child, node.children) for child in reversed(tree.nodes[idx].children))
    return roots


@router.get("", response_model=List[MenuNode])
async def my_menu(
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """The navigation tree visible to the current user."""
    return _to_nodes(NavigationService(db).menu_tree(subject))


@router.get("/all", response_model=List[MenuNode])
async def all_menus(
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """The unfiltered tree, for menu administrators."""
    return _to_nodes(NavigationService(db).full_tree(subject))


@router.post("/reorder", response_model=SuccessResponse)
async def reorder_menus(
    payload: MenuReorderRequest,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Reposition menu items. Items sent without parent_id keep their parent."""
    NavigationService(db).reorder(subject, [item.model_dump(exclude_unset=True) for item in payload.items])
    return SuccessResponse(message="Menu order updated successfully")


@router.get("/{menu_id}", response_model=MenuResponse)
async def get_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(authorize("menus.view")),
):
    return MenuResponse.model_validate(NavigationService(db).get_menu(menu_id))


@router.post("", response_model=MenuResponse, status_code=status.HTTP_201_CREATED)
async def create_menu(
    data: MenuCreate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Create a menu item; without an order it goes after its last sibling."""
    menu = NavigationService(db).create_menu(subject, **data.model_dump())
    return MenuResponse.model_validate(menu)


@router.patch("/{menu_id}", response_model=MenuResponse)
async def update_menu(
    menu_id: int,
    data: MenuUpdate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    menu = NavigationService(db).update_menu(subject, menu_id, **data.model_dump(exclude_unset=True))
    return MenuResponse.model_validate(menu)


@router.delete("/{menu_id}", response_model=SuccessResponse)
async def delete_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Move a menu item to the trash. Fails while it has children."""
    NavigationService(db).delete_menu(subject, menu_id)
    return SuccessResponse(message="Menu deleted successfully")


@router.post("/{menu_id}/restore", response_model=MenuResponse)
async def restore_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    return MenuResponse.model_validate(NavigationService(db).restore_menu(subject, menu_id))


@router.delete("/{menu_id}/force", response_model=SuccessResponse)
async def force_delete_menu(
    menu_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    NavigationService(db).force_delete_menu(subject, menu_id)
    return SuccessResponse(message="Menu permanently deleted")
