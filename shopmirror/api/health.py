"""
Health check and status endpoints
"""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from datetime import datetime
from shopmirror import __version__

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness check"""
    return "Shopmirror API is running..."


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": __version__
    }
