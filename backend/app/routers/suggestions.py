"""
Suggested trades router.
"""

from typing import List

from fastapi import APIRouter, Depends, Response

from app.dependencies import get_current_user_id, get_trade_finder
from app.models.schemas import SuggestedTrade
from app.services.trade_finder import TradeCycleFinder
from app.utils.hasher import hash_records


router = APIRouter(prefix="/api", tags=["suggestions"])


@router.api_route("/suggested-trades", methods=["GET", "POST"], response_model=List[SuggestedTrade])
def find_suggested_trades(
    response: Response,
    user_id: str = Depends(get_current_user_id),
    finder: TradeCycleFinder = Depends(get_trade_finder),
) -> List[SuggestedTrade]:
    """Three-way trades that start and end with the caller."""
    result = finder.find(user_id)

    response.headers["ETag"] = f'"{hash_records([s.model_dump() for s in result.suggestions])}"'
    if result.truncated:
        response.headers["X-Suggestions-Truncated"] = "true"
    return result.suggestions
