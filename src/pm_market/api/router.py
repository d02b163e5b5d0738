"""pm_market REST endpoints.

GET  /markets/{market_id}  full detail (phase, supplies, prices, pool)
GET  /markets/{market_id}/prices  spot prices
GET  /markets/{market_id}/open  is the trading window open
PUT  /markets/{market_id}/start-time  schedule start (unix seconds)
PUT  /markets/{market_id}/duration  schedule length (seconds)
POST /markets/{market_id}/buy  payment -> outcome tokens
POST /markets/{market_id}/convert  outcome -> other outcome
POST /markets/{market_id}/claim  settle a holder after resolution
GET  /markets/{market_id}/positions/{holder}  holder balances
GET  /markets/{market_id}/holders/{outcome}  holder set enumeration
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.enums import Outcome
from src.pm_common.response import ApiResponse, success_response
from src.pm_market.application.schemas import (
    BuyRequest,
    ClaimRequest,
    ConvertRequest,
    DurationRequest,
    StartTimeRequest,
)
from src.pm_market.application.service import MarketApplicationService, get_market_service

router = APIRouter(prefix="/markets", tags=["markets"])

Service = Annotated[MarketApplicationService, Depends(get_market_service)]
Db = Annotated[AsyncSession | None, Depends(get_db_session)]


@router.get("/{market_id}")
async def get_market(
    market_id: str, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.get_market(db, market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/prices")
async def get_prices(
    market_id: str, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.get_prices(db, market_id)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}/open")
async def is_market_open(
    market_id: str, request: Request, service: Service, db: Db
) -> ApiResponse:
    is_open = await service.is_market_open(db, market_id)
    return success_response({"market_id": market_id, "is_open": is_open}, request)


@router.put("/{market_id}/start-time")
async def set_start_time(
    market_id: str, body: StartTimeRequest, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.set_start_time(db, market_id, body.start_time)
    return success_response(result.model_dump(mode="json"), request)


@router.put("/{market_id}/duration")
async def set_duration(
    market_id: str, body: DurationRequest, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.set_duration(db, market_id, body.duration)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/buy")
async def buy(
    market_id: str, body: BuyRequest, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.buy(db, market_id, body.outcome, body.payer, body.payment_amount)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/convert")
async def convert(
    market_id: str, body: ConvertRequest, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.convert(
        db, market_id, body.holder, body.from_outcome, body.amount_in
    )
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{market_id}/claim")
async def claim(
    market_id: str, body: ClaimRequest, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.claim(db, market_id, body.claimant)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/positions/{holder}")
async def get_position(
    market_id: str, holder: str, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.get_position(db, market_id, holder)
    return success_response(result.model_dump(), request)


@router.get("/{market_id}/holders/{outcome}")
async def get_holders(
    market_id: str, outcome: Outcome, request: Request, service: Service, db: Db
) -> ApiResponse:
    result = await service.get_holders(db, market_id, outcome)
    return success_response(result.model_dump(mode="json"), request)
