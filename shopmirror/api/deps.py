"""
Request dependencies
"""
from fastapi import Request

from shopmirror.services.sync_service import SyncService


def get_sync_service(request: Request) -> SyncService:
    """SyncService built at startup and shared by every request"""
    return request.app.state.sync_service
