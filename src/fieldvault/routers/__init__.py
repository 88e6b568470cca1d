from .health import router as health_router
from .maintenance import router as maintenance_router
from .users import router as users_router

_routers = [health_router, users_router, maintenance_router]

__all__ = ["get_routers"]


def get_routers():
    return _routers
