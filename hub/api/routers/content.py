"""Content API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hub.api.deps import get_db, get_subject
from hub.api.schemas.common import SuccessResponse
from hub.api.schemas.rbac import ContentCreate, ContentResponse, ContentUpdate
from hub.core.rbac.subject import Subject
from hub.services.navigation import NavigationService

router = APIRouter(prefix="/content", tags=["content"])


@router.get("", response_model=List[ContentResponse])
async def list_content(
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    return [ContentResponse.model_validate(c) for c in NavigationService(db).list_content(subject)]


@router.get("/{slug}", response_model=ContentResponse)
async def get_content(
    slug: str,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    return ContentResponse.model_validate(NavigationService(db).get_content(subject, slug))


@router.post("", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    data: ContentCreate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Create a page. A missing slug is generated from the title."""
    content = NavigationService(db).create_content(subject, **data.model_dump())
    return ContentResponse.model_validate(content)


@router.patch("/{content_id}", response_model=ContentResponse)
async def update_content(
    content_id: int,
    data: ContentUpdate,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    content = NavigationService(db).update_content(subject, content_id, **data.model_dump(exclude_unset=True))
    return ContentResponse.model_validate(content)


@router.post("/{content_id}/publish", response_model=ContentResponse)
async def publish_content(
    content_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    return ContentResponse.model_validate(NavigationService(db).publish_content(subject, content_id))


@router.delete("/{content_id}/publish", response_model=ContentResponse)
async def unpublish_content(
    content_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    content = NavigationService(db).publish_content(subject, content_id, published=False)
    return ContentResponse.model_validate(content)


@router.delete("/{content_id}", response_model=SuccessResponse)
async def delete_content(
    content_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    """Move a page to the trash. Fails while a menu item links to it."""
    NavigationService(db).delete_content(subject, content_id)
    return SuccessResponse(message="Content deleted successfully")


@router.post("/{content_id}/restore", response_model=ContentResponse)
async def restore_content(
    content_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    return ContentResponse.model_validate(NavigationService(db).restore_content(subject, content_id))


@router.delete("/{content_id}/force", response_model=SuccessResponse)
async def force_delete_content(
    content_id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
):
    NavigationService(db).force_delete_content(subject, content_id)
    return SuccessResponse(message="Content permanently deleted")
