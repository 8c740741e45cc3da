from fastapi import APIRouter

from ttresolve.config.settings import config
from ttresolve.core.state import state
from ttresolve.i18n import i18n

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": i18n.get("response.status_running"),
        "service": config.api.title,
        "version": config.api.version,
        "uptime_seconds": state.uptime_seconds,
    }


@router.get("/health")
async def health_check():
    """Lightweight health check"""
    return {"status": i18n.get("health.status")}
