"""
Controllers Package - The 'C' in MVC

Each controller is a FastAPI APIRouter that defines endpoints
for a specific resource or feature area.
"""

from app.controllers.auth import router as auth_router
from app.controllers.conversations import router as conversations_router
from app.controllers.followers import router as followers_router
from app.controllers.notifications import router as notifications_router
from app.controllers.kyutai import router as kyutai_router
from app.controllers.example import router as example_router

__all__ = [
    "auth_router",
    "conversations_router",
    "followers_router",
    "notifications_router",
    "kyutai_router",
    "example_router",
]
