"""
Callback redirect routes.

The identity provider returns the user agent to a fixed callback URL with the
original ``state`` value. The router forwards the user agent to that value
verbatim, or to the root URL when no state came back. It does not inspect
``state``; whoever consumes the redirected value is responsible for that.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import RedirectResponse

logger = logging.getLogger(__name__)

DEFAULT_CALLBACK_PATH = "/oauth/callback"


def create_callback_router(root_url: str, path: str = DEFAULT_CALLBACK_PATH) -> APIRouter:
    """Create FastAPI router for the callback endpoint.

    Args:
        root_url: Fallback redirect target
        path: Callback path registered with the identity provider

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.get(path, status_code=status.HTTP_302_FOUND)
    async def auth_callback(state: Optional[str] = Query(default=None)):
        target = state if state else root_url
        logger.debug(f"Callback redirect, state present: {bool(state)}")
        return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)

    return router
