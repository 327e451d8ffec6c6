"""Trade journal API: CRUD, draft derivation and stats."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Response

from journal.api.deps import get_current_user, get_trade_repository
from journal.errors import NotFound
from journal.models.user import User
from journal.schemas.trade import (
    DerivedFields,
    TradeCreate,
    TradeDraftFields,
    TradeRead,
    TradeStats,
    TradeUpdate,
)
from journal.services.derivation import derive_direction, derive_r_multiple
from journal.services.repository import TradeRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


@router.get("", response_model=list[TradeRead])
def list_trades(
    start: date | None = None,
    end: date | None = None,
    user: User = Depends(get_current_user),
    repo: TradeRepository = Depends(get_trade_repository),
):
    if start is None and end is None:
        return repo.list(user.id)
    if start is None or end is None:
        raise HTTPException(status_code=422, detail="start and end must be given together")
    return repo.list_by_date_range(user.id, start, end)


@router.get("/stats", response_model=TradeStats)
def trade_stats(
    user: User = Depends(get_current_user),
    repo: TradeRepository = Depends(get_trade_repository),
):
    return repo.stats(user.id)


@router.post("/derive", response_model=DerivedFields, dependencies=[Depends(get_current_user)])
def derive_fields(draft: TradeDraftFields):
    """Recompute direction and R-multiple for a draft being edited."""
    return DerivedFields(
        direction=derive_direction(draft.avg_entry, draft.stop_loss, draft.direction),
        r_multiple=derive_r_multiple(draft.risk, draft.realised_win, draft.realised_loss),
    )


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(
    trade_id: int,
    user: User = Depends(get_current_user),
    repo: TradeRepository = Depends(get_trade_repository),
):
    return repo.get(trade_id, user_id=user.id)


@router.post("", response_model=TradeRead, status_code=201)
def create_trade(
    data: TradeCreate,
    user: User = Depends(get_current_user),
    repo: TradeRepository = Depends(get_trade_repository),
):
    return repo.create(user.id, data.model_dump())


@router.put("/{trade_id}", response_model=TradeRead)
def update_trade(
    trade_id: int,
    data: TradeUpdate,
    user: User = Depends(get_current_user),
    repo: TradeRepository = Depends(get_trade_repository),
):
    return repo.update(trade_id, data.model_dump(exclude_unset=True), user_id=user.id)


@router.delete("/{trade_id}", status_code=204)
def delete_trade(
    trade_id: int,
    user: User = Depends(get_current_user),
    repo: TradeRepository = Depends(get_trade_repository),
):
    try:
        repo.delete(trade_id, user_id=user.id)
    except NotFound:
        # Already gone; deleting twice is not an error for the caller
        logger.debug(f"Delete of missing trade {trade_id} ignored")
    return Response(status_code=204)
