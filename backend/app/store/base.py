"""
Data-access contracts for the barter backend.

The suggestion search only needs ``ItemLikeRepository``; the trade and like
routers need the write-side stores. ``BarterRepository`` bundles all of them
for the concrete backends.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from app.models.schemas import Item, Like, Profile, Trade, TradeStatus


class ItemLikeRepository(ABC):
    """Read access to items, likes and profiles."""

    @abstractmethod
    def likers_of(self, item_id: str, limit: Optional[int] = None) -> List[Like]:
        """Likes on an item, newest first, at most ``limit`` of them."""

    @abstractmethod
    def available_items_owned_by(self, user_id: str) -> List[Item]:
        """Items owned by the user that are currently available."""

    @abstractmethod
    def liked_by(self, user_id: str) -> List[Like]:
        """Likes recorded by the user."""

    @abstractmethod
    def get_items(self, item_ids: Iterable[str]) -> Dict[str, Item]:
        """Items by id; unknown ids are omitted."""

    @abstractmethod
    def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        """Profiles by user id; unknown ids are omitted."""


class LikeStore(ABC):
    @abstractmethod
    def add_like(self, user_id: str, item_id: str) -> bool:
        """Record a like. Returns False when it already existed."""

    @abstractmethod
    def remove_like(self, user_id: str, item_id: str) -> bool:
        """Withdraw a like. Returns False when there was none."""


def trade_version(trade: Trade) -> Tuple[str, bool, bool]:
    return (trade.status.value, trade.proposer_confirmed, trade.receiver_confirmed)


class TradeStore(ABC):
    @abstractmethod
    def insert_trade(self, trade: Trade) -> Trade: ...

    @abstractmethod
    def get_trade(self, trade_id: str) -> Optional[Trade]: ...

    @abstractmethod
    def update_trade(self, trade: Trade, expected: Trade) -> Trade:
        """Write ``trade`` only if the stored status and confirmation flags
        still match ``expected``; raises StaleTrade otherwise."""

    @abstractmethod
    def trades_for_user(
        self, user_id: str, status: Optional[TradeStatus] = None
    ) -> List[Trade]:
        """Trades where the user is proposer or receiver, newest first."""

    @abstractmethod
    def mark_unavailable(self, item_ids: Iterable[str]) -> None: ...


class BarterRepository(ItemLikeRepository, LikeStore, TradeStore):
    """Everything the HTTP layer needs from a backend."""
