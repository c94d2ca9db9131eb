"""
Likes router.
"""

from fastapi import APIRouter, Depends

from app.dependencies import get_current_user_id, get_repository
from app.models.schemas import LikeResponse
from app.store.base import BarterRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/items", tags=["likes"])


@router.post("/{item_id}/like", response_model=LikeResponse)
def like_item(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: BarterRepository = Depends(get_repository),
) -> LikeResponse:
    """Record interest in an item. Liking twice is a no-op."""
    if repository.add_like(user_id, item_id):
        logger.debug("User %s liked item %s", user_id, item_id)
    return LikeResponse(user_id=user_id, item_id=item_id, liked=True)


@router.delete("/{item_id}/like", response_model=LikeResponse)
def unlike_item(
    item_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: BarterRepository = Depends(get_repository),
) -> LikeResponse:
    """Withdraw interest in an item. Withdrawing twice is a no-op."""
    repository.remove_like(user_id, item_id)
    return LikeResponse(user_id=user_id, item_id=item_id, liked=False)
