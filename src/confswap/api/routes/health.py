"""Health check endpoints."""

from fastapi import APIRouter, Depends

from confswap.api.dependencies import get_session
from confswap.session import SwapSession

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "confswap"}


@router.get("/health/detailed")
async def detailed_health(session: SwapSession = Depends(get_session)):
    """Detailed health check with configuration and collaborator status."""
    encryption_ok = await session.encryption.health_check()
    return {
        "status": "healthy" if encryption_ok else "degraded",
        "service": "confswap",
        "version": "0.1.0",
        "encryption": {
            "service": session.encryption.name,
            "reachable": encryption_ok,
        },
        "chain": {
            "client": session.chain.name,
            **session.context.to_dict(),
        },
        "config": session.settings.get_safe_dict(),
    }
