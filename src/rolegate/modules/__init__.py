"""Feature modules.

Each subpackage exposing a ``router`` is mounted under ``/api/v1`` by
``discover_modules``.
"""

import pkgutil
from importlib import import_module

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Import every feature subpackage and collect its router.

    Subpackages are visited in name order. A subpackage without a
    ``router`` is skipped; one that fails to import stops startup.
    """
    routers: list[APIRouter] = []
    for info in sorted(pkgutil.iter_modules(__path__), key=lambda m: m.name):
        if not info.ispkg or info.name.startswith("_"):
            continue
        module = import_module(f"{__name__}.{info.name}")
        router = getattr(module, "router", None)
        if isinstance(router, APIRouter):
            routers.append(router)
            logger.debug("module_loaded", module=info.name, prefix=router.prefix)
    return routers
