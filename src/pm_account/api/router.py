"""pm_account REST API: liquidity incentive points per provider address."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_market.application.service import MarketApplicationService, get_market_service

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/{address}/points")
async def get_liquidity_points(
    address: str,
    request: Request,
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    points = await service.get_liquidity_points(db, address)
    return success_response({"address": address, "points": points}, request)
