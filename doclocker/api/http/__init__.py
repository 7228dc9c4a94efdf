from doclocker.api.http.health import router as health_router
from doclocker.api.http.auth import router as auth_router
from doclocker.api.http.users import router as users_router
from doclocker.api.http.documents import router as documents_router

__all__ = [
    "health_router",
    "auth_router",
    "users_router",
    "documents_router"
]
