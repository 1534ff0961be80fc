"""Game API routes package.

Exposes a single ``router`` that aggregates the sub-module routers.
"""

from fastapi import APIRouter

from .gameplay import router as _gameplay_router
from .media import router as _media_router
from .session_mgmt import router as _session_mgmt_router

# ``api.main`` does ``from .routes import game`` and uses ``game.router``.
router = APIRouter()
router.include_router(_session_mgmt_router)
router.include_router(_gameplay_router)
router.include_router(_media_router)
