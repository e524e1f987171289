"""Application-state dependencies for the CCTV routes."""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from ..core.dispatcher import EventDispatcher
from ..registry.base import CCTVRegistry


def get_registry(request: Request) -> CCTVRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Registry not initialized",
        )
    return registry


def get_dispatcher(request: Request) -> Optional[EventDispatcher]:
    return getattr(request.app.state, "dispatcher", None)


Registry = Annotated[CCTVRegistry, Depends(get_registry)]
Dispatcher = Annotated[Optional[EventDispatcher], Depends(get_dispatcher)]
