"""
Trades router.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user_id, get_trade_service
from app.models.schemas import Trade, TradeCreate, TradeStatus
from app.services.trade_service import TradeService


router = APIRouter(prefix="/api/trades", tags=["trades"])


@router.post("", response_model=Trade, status_code=201)
def create_trade(
    request: TradeCreate,
    user_id: str = Depends(get_current_user_id),
    service: TradeService = Depends(get_trade_service),
) -> Trade:
    """Propose a trade of one of the caller's items for one of the receiver's."""
    return service.create_trade(user_id, request)


@router.get("", response_model=List[Trade])
def list_trades(
    status: Optional[TradeStatus] = None,
    user_id: str = Depends(get_current_user_id),
    service: TradeService = Depends(get_trade_service),
) -> List[Trade]:
    """Trades the caller sent or received, newest first."""
    return service.list_trades(user_id, status)


@router.get("/{trade_id}", response_model=Trade)
def get_trade(
    trade_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TradeService = Depends(get_trade_service),
) -> Trade:
    return service.get_trade(trade_id, user_id)


@router.post("/{trade_id}/accept", response_model=Trade)
def accept_trade(
    trade_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TradeService = Depends(get_trade_service),
) -> Trade:
    return service.accept(trade_id, user_id)


@router.post("/{trade_id}/reject", response_model=Trade)
def reject_trade(
    trade_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TradeService = Depends(get_trade_service),
) -> Trade:
    return service.reject(trade_id, user_id)


@router.post("/{trade_id}/confirm", response_model=Trade)
def confirm_trade(
    trade_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TradeService = Depends(get_trade_service),
) -> Trade:
    """Confirm the hand-off; the trade completes once both parties confirm."""
    return service.confirm_completion(trade_id, user_id)
