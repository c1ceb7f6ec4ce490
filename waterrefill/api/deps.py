"""Shared FastAPI dependencies and response helpers."""

from typing import Any, AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Services not started")
    return services


def current_user_id(
    x_user_id: Optional[str] = Header(None, alias=settings.user_id_header),
) -> str:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.user_id_header} header",
        )
    return x_user_id


def failure(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Error payload in the same shape as successful operation results."""
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


async def get_db_session(services: ServiceContainer = Depends(get_services)) -> AsyncGenerator[AsyncSession, None]:
    if services.session_factory is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database not configured")
    async with get_db(services.session_factory) as session:
        yield session


async def require_system_token(x_api_key: Optional[str] = Header(default=None)) -> None:
    token = settings.system_api_token.strip()
    if not token:
        return
    if x_api_key != token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
