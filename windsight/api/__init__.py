"""
API Module — FastAPI Scoring Service & Monitoring Endpoints

Public API:
- app: FastAPI application instance
- router: Scoring routes
- monitor_router: Session routes
"""

from .main import app
from .monitor_routes import router as monitor_router
from .routes import router
from .state import MonitorSession, build_session

__all__ = [
    "app",
    "router",
    "monitor_router",
    "MonitorSession",
    "build_session",
]
