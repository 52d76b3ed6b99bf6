"""Analytics Hub RBAC core.

Role/permission based access control for the admin dashboard: the permission
registry, role resolution, per-resource authorization policies and the
hierarchical menu visibility filter.
"""

__version__ = "0.3.0"
