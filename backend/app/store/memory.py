"""
In-memory repository, used by tests and for serving a CSV snapshot locally.
"""

import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from app.exceptions import ResourceNotFound, StaleTrade, ValidationError
from app.models.schemas import Item, Like, Profile, Trade, TradeStatus
from app.store.base import BarterRepository, trade_version


class InMemoryRepository(BarterRepository):
    """Thread-safe snapshot of profiles, items, likes and trades."""

    def __init__(
        self,
        profiles: Iterable[Profile] = (),
        items: Iterable[Item] = (),
        likes: Iterable[Like] = (),
        trades: Iterable[Trade] = (),
    ):
        self._lock = threading.RLock()
        self._profiles: Dict[str, Profile] = {}
        self._items: Dict[str, Item] = {}
        self._likes: Dict[Tuple[str, str], Like] = {}
        self._trades: Dict[str, Trade] = {}

        for profile in profiles:
            self.add_profile(profile)
        for item in items:
            self.add_item(item)
        for like in likes:
            self.add_like(like.user_id, like.item_id, created_at=like.created_at)
        for trade in trades:
            self.insert_trade(trade)

    # --- seeding -------------------------------------------------------

    def add_profile(self, profile: Profile) -> None:
        with self._lock:
            self._profiles[profile.id] = profile

    def add_item(self, item: Item) -> None:
        with self._lock:
            self._items[item.id] = item

    def set_available(self, item_id: str, available: bool) -> None:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise ResourceNotFound(f"Item '{item_id}' not found")
            self._items[item_id] = item.model_copy(update={"is_available": available})

    # --- reads ---------------------------------------------------------

    def likers_of(self, item_id: str, limit: Optional[int] = None) -> List[Like]:
        with self._lock:
            likes = [like for (_, liked), like in self._likes.items() if liked == item_id]
        likes.sort(key=lambda like: like.user_id)
        likes.sort(key=lambda like: like.created_at, reverse=True)
        return likes if limit is None else likes[:limit]

    def available_items_owned_by(self, user_id: str) -> List[Item]:
        with self._lock:
            items = [
                item
                for item in self._items.values()
                if item.user_id == user_id and item.is_available
            ]
        return sorted(items, key=lambda item: item.id)

    def liked_by(self, user_id: str) -> List[Like]:
        with self._lock:
            likes = [like for (liker, _), like in self._likes.items() if liker == user_id]
        return sorted(likes, key=lambda like: like.item_id)

    def get_items(self, item_ids: Iterable[str]) -> Dict[str, Item]:
        with self._lock:
            return {i: self._items[i] for i in item_ids if i in self._items}

    def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        with self._lock:
            return {u: self._profiles[u] for u in user_ids if u in self._profiles}

    # --- likes ---------------------------------------------------------

    def add_like(
        self, user_id: str, item_id: str, created_at: Optional[datetime] = None
    ) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise ResourceNotFound(f"Item '{item_id}' not found")
            if item.user_id == user_id:
                raise ValidationError("Users cannot like their own items")
            key = (user_id, item_id)
            if key in self._likes:
                return False
            self._likes[key] = Like(
                user_id=user_id,
                item_id=item_id,
                created_at=created_at or datetime.now(timezone.utc),
            )
            return True

    def remove_like(self, user_id: str, item_id: str) -> bool:
        with self._lock:
            return self._likes.pop((user_id, item_id), None) is not None

    # --- trades --------------------------------------------------------

    def insert_trade(self, trade: Trade) -> Trade:
        with self._lock:
            self._trades[trade.id] = trade
        return trade

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        with self._lock:
            return self._trades.get(trade_id)

    def update_trade(self, trade: Trade, expected: Trade) -> Trade:
        with self._lock:
            stored = self._trades.get(trade.id)
            if stored is None:
                raise ResourceNotFound(f"Trade '{trade.id}' not found")
            if trade_version(stored) != trade_version(expected):
                raise StaleTrade(f"Trade '{trade.id}' was changed by another request")
            self._trades[trade.id] = trade
        return trade

    def trades_for_user(
        self, user_id: str, status: Optional[TradeStatus] = None
    ) -> List[Trade]:
        with self._lock:
            trades = [
                t
                for t in self._trades.values()
                if user_id in (t.proposer_id, t.receiver_id)
                and (status is None or t.status == status)
            ]
        return sorted(trades, key=lambda t: (t.created_at, t.id), reverse=True)

    def mark_unavailable(self, item_ids: Iterable[str]) -> None:
        with self._lock:
            for item_id in item_ids:
                if item_id in self._items:
                    self.set_available(item_id, False)
