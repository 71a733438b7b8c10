"""Roles module - role store and role assignments."""

from rolegate.modules.roles.routes import router


__all__ = ["router"]
