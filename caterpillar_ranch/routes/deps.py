"""Shared route dependencies"""

from fastapi import Request

from ..services.store import RanchStore


def get_store(request: Request) -> RanchStore:
    """The RanchStore owned by the running application"""
    return request.app.state.store
