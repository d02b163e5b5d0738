"""Exchange callback endpoint: POST /hooks/events."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_hooks.api.schemas import AnyHookBody
from src.pm_market.application.service import MarketApplicationService, get_market_service

router = APIRouter(prefix="/hooks", tags=["hooks"])


@router.post("/events")
async def handle_event(
    body: Annotated[AnyHookBody, Body(discriminator="event")],
    request: Request,
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await service.dispatch_hook(db, body.to_event())
    return success_response(result, request)
