"""Service layer for the Analytics Hub."""

from hub.services.navigation import NavigationService
from hub.services.rbac import RbacService

__all__ = ["NavigationService", "RbacService"]
