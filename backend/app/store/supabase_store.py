"""
Supabase-backed repository over the ``profiles``, ``items``, ``liked_items``
and ``trades`` tables.
"""

from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

import httpx
from postgrest.exceptions import APIError
from pydantic import BaseModel
from supabase import Client, create_client

from app.config import Settings
from app.exceptions import DataUnavailable, ResourceNotFound, StaleTrade, ValidationError
from app.models.schemas import Item, Like, Profile, Trade, TradeStatus
from app.store.base import BarterRepository, trade_version
from app.utils.logger import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

ITEM_COLUMNS = "id, user_id, name, category, description, image_url, media_files, is_available, created_at"
LIKE_COLUMNS = "user_id, item_id, created_at"
PROFILE_COLUMNS = "id, name, avatar_url"


def _to_model(model: Type[M], row: Dict[str, Any]) -> M:
    # Nullable columns fall back to model defaults
    return model.model_validate({k: v for k, v in row.items() if v is not None})


class SupabaseRepository(BarterRepository):
    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseRepository":
        return cls(create_client(settings.supabase_url, settings.supabase_service_key))

    def _execute(self, query, what: str) -> List[Dict[str, Any]]:
        try:
            response = query.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error("Supabase query failed while %s: %s", what, e)
            raise DataUnavailable(f"Backend query failed while {what}") from e
        return response.data or []

    # --- reads ---------------------------------------------------------

    def likers_of(self, item_id: str, limit: Optional[int] = None) -> List[Like]:
        query = (
            self.client.table("liked_items")
            .select(LIKE_COLUMNS)
            .eq("item_id", item_id)
            .order("created_at", desc=True)
            .order("user_id")
        )
        if limit is not None:
            query = query.limit(limit)
        rows = self._execute(query, f"loading likers of item {item_id}")
        return [_to_model(Like, row) for row in rows]

    def available_items_owned_by(self, user_id: str) -> List[Item]:
        query = (
            self.client.table("items")
            .select(ITEM_COLUMNS)
            .eq("user_id", user_id)
            .eq("is_available", True)
            .order("id")
        )
        rows = self._execute(query, f"loading items of user {user_id}")
        return [_to_model(Item, row) for row in rows]

    def liked_by(self, user_id: str) -> List[Like]:
        query = (
            self.client.table("liked_items")
            .select(LIKE_COLUMNS)
            .eq("user_id", user_id)
            .order("item_id")
        )
        rows = self._execute(query, f"loading likes of user {user_id}")
        return [_to_model(Like, row) for row in rows]

    def get_items(self, item_ids: Iterable[str]) -> Dict[str, Item]:
        ids = sorted(set(item_ids))
        if not ids:
            return {}
        query = self.client.table("items").select(ITEM_COLUMNS).in_("id", ids)
        rows = self._execute(query, "loading items")
        return {row["id"]: _to_model(Item, row) for row in rows}

    def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, Profile]:
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        query = self.client.table("profiles").select(PROFILE_COLUMNS).in_("id", ids)
        rows = self._execute(query, "loading profiles")
        return {row["id"]: _to_model(Profile, row) for row in rows}

    # --- likes ---------------------------------------------------------

    def add_like(self, user_id: str, item_id: str) -> bool:
        items = self.get_items([item_id])
        if item_id not in items:
            raise ResourceNotFound(f"Item '{item_id}' not found")
        if items[item_id].user_id == user_id:
            raise ValidationError("Users cannot like their own items")

        # A duplicate like is ignored by the unique key and returns no row
        rows = self._execute(
            self.client.table("liked_items").upsert(
                {"user_id": user_id, "item_id": item_id},
                on_conflict="user_id,item_id",
                ignore_duplicates=True,
            ),
            "recording like",
        )
        return bool(rows)

    def remove_like(self, user_id: str, item_id: str) -> bool:
        rows = self._execute(
            self.client.table("liked_items")
            .delete()
            .eq("user_id", user_id)
            .eq("item_id", item_id),
            "removing like",
        )
        return bool(rows)

    # --- trades --------------------------------------------------------

    def insert_trade(self, trade: Trade) -> Trade:
        rows = self._execute(
            self.client.table("trades").insert(trade.model_dump(mode="json")),
            "creating trade",
        )
        return _to_model(Trade, rows[0]) if rows else trade

    def get_trade(self, trade_id: str) -> Optional[Trade]:
        rows = self._execute(
            self.client.table("trades").select("*").eq("id", trade_id),
            f"loading trade {trade_id}",
        )
        return _to_model(Trade, rows[0]) if rows else None

    def update_trade(self, trade: Trade, expected: Trade) -> Trade:
        payload = trade.model_dump(mode="json", exclude={"id", "created_at"})
        status, proposer_confirmed, receiver_confirmed = trade_version(expected)
        rows = self._execute(
            self.client.table("trades")
            .update(payload)
            .eq("id", trade.id)
            .eq("status", status)
            .eq("proposer_confirmed", proposer_confirmed)
            .eq("receiver_confirmed", receiver_confirmed),
            f"updating trade {trade.id}",
        )
        if rows:
            return _to_model(Trade, rows[0])
        # No row matched: either gone or changed since it was read
        if self.get_trade(trade.id) is None:
            raise ResourceNotFound(f"Trade '{trade.id}' not found")
        raise StaleTrade(f"Trade '{trade.id}' was changed by another request")

    def trades_for_user(
        self, user_id: str, status: Optional[TradeStatus] = None
    ) -> List[Trade]:
        query = (
            self.client.table("trades")
            .select("*")
            .or_(f"proposer_id.eq.{user_id},receiver_id.eq.{user_id}")
        )
        if status is not None:
            query = query.eq("status", status.value)
        query = query.order("created_at", desc=True)
        rows = self._execute(query, f"loading trades of user {user_id}")
        return [_to_model(Trade, row) for row in rows]

    def mark_unavailable(self, item_ids: Iterable[str]) -> None:
        ids = sorted(set(item_ids))
        if not ids:
            return
        self._execute(
            self.client.table("items").update({"is_available": False}).in_("id", ids),
            "marking items unavailable",
        )
