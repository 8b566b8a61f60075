# Import all routes
from .auth import router as auth_router
from .users import router as users_router
from .scholarships import router as scholarships_router, admin_router as admin_scholarships_router
from .applications import router as applications_router
from .admin_applications import router as admin_applications_router
from .events import router as events_router, admin_router as admin_events_router
from .health import router as health_router

# All routers that should be included in main app
__all__ = [
    "auth_router",
    "users_router",
    "scholarships_router",
    "admin_scholarships_router",
    "applications_router",
    "admin_applications_router",
    "events_router",
    "admin_events_router",
    "health_router",
]
