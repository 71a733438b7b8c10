"""Permissions module - the catalog of (action, resource) permissions."""

from rolegate.modules.permissions.routes import router


__all__ = ["router"]
