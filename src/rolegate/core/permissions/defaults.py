"""Default permission and role catalogue.

Seeded by ``POST /permissions/initialize`` and ``scripts/seed.py``.
"""

from typing import NamedTuple


class PermissionSeed(NamedTuple):
    action: str
    resource: str
    description: str


class RoleSeed(NamedTuple):
    name: str
    description: str


DEFAULT_PERMISSIONS: tuple[PermissionSeed, ...] = (
    # Usuarios
    PermissionSeed("crear", "usuarios", "Crear nuevos usuarios"),
    PermissionSeed("leer", "usuarios", "Ver información de usuarios"),
    PermissionSeed("actualizar", "usuarios", "Actualizar información de usuarios"),
    PermissionSeed("eliminar", "usuarios", "Eliminar usuarios"),
    # Productos
    PermissionSeed("crear", "productos", "Crear nuevos productos"),
    PermissionSeed("leer", "productos", "Ver productos"),
    PermissionSeed("actualizar", "productos", "Actualizar productos"),
    PermissionSeed("eliminar", "productos", "Eliminar productos"),
    # Categorías
    PermissionSeed("crear", "categorias", "Crear nuevas categorías"),
    PermissionSeed("leer", "categorias", "Ver categorías"),
    PermissionSeed("actualizar", "categorias", "Actualizar categorías"),
    PermissionSeed("eliminar", "categorias", "Eliminar categorías"),
    # Pedidos
    PermissionSeed("crear", "pedidos", "Crear nuevos pedidos"),
    PermissionSeed("leer", "pedidos", "Ver pedidos"),
    PermissionSeed("actualizar", "pedidos", "Actualizar estado de pedidos"),
    PermissionSeed("eliminar", "pedidos", "Cancelar pedidos"),
    # Roles
    PermissionSeed("crear", "roles", "Crear nuevos roles"),
    PermissionSeed("leer", "roles", "Ver roles"),
    PermissionSeed("actualizar", "roles", "Actualizar roles"),
    PermissionSeed("eliminar", "roles", "Eliminar roles"),
    PermissionSeed("asignar", "roles", "Asignar roles a usuarios"),
    # Sistema
    PermissionSeed("leer", "metricas", "Ver métricas y estadísticas"),
    PermissionSeed("exportar", "reportes", "Exportar reportes"),
    PermissionSeed("administrar", "sistema", "Administración completa del sistema"),
)

DEFAULT_ROLES: tuple[RoleSeed, ...] = (
    RoleSeed("admin", "Administrador del sistema"),
    RoleSeed("productor", "Usuario productor"),
    RoleSeed("consumidor", "Usuario consumidor"),
)
