"""Admin REST API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_admin.application.service import AdminService
from src.pm_common.database import get_db_session
from src.pm_common.enums import Outcome
from src.pm_common.response import ApiResponse, success_response

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class ResolveRequest(BaseModel):
    outcome: Outcome


class FundPoolRequest(BaseModel):
    sponsor: str = Field(min_length=1)
    amount: int = Field(ge=0)


@router.post("/markets/{market_id}/resolve")
async def resolve_market(
    market_id: str,
    body: ResolveRequest,
    request: Request,
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.resolve_market(db, market_id, body.outcome)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/markets/{market_id}/fund")
async def fund_pool(
    market_id: str,
    body: FundPoolRequest,
    request: Request,
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.fund_pool(db, market_id, body.sponsor, body.amount)
    return success_response(result, request)


@router.get("/markets/{market_id}/stats")
async def get_market_stats(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession | None, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_market_stats(db, market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/verify-invariants")
async def verify_invariants(request: Request) -> ApiResponse:
    result = await _service.verify_all_invariants()
    return success_response(result, request)
