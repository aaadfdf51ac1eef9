"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..ops import SessionCache
from .routes import router

# Global session cache
_sessions: Optional[SessionCache] = None


def get_sessions() -> SessionCache:
    """Get the global session cache."""
    global _sessions
    if _sessions is None:
        _sessions = SessionCache()
    return _sessions


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="rollmark",
        description="Attendance and grade entry for course roster workbooks",
        version=__version__,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app
