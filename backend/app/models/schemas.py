"""
Pydantic schemas for the barter backend.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List

from pydantic import AfterValidator, BaseModel, Field


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Naive timestamps from CSV exports are taken as UTC
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class Profile(BaseModel):
    id: str
    name: str | None = None
    avatar_url: str | None = None


class Item(BaseModel):
    id: str
    user_id: str
    name: str
    category: str | None = None
    description: str | None = None
    image_url: str | None = None
    media_files: List[str] = Field(default_factory=list)
    is_available: bool = True
    created_at: UtcDatetime | None = None

    @property
    def primary_image(self) -> str | None:
        if self.image_url:
            return self.image_url
        return self.media_files[0] if self.media_files else None


class Like(BaseModel):
    user_id: str
    item_id: str
    created_at: UtcDatetime


class LikeResponse(BaseModel):
    user_id: str
    item_id: str
    liked: bool


class SuggestedTrade(BaseModel):
    user_a_id: str
    user_a_name: str | None
    user_a_avatar: str | None
    item_a_id: str
    item_a_name: str
    item_a_image: str | None
    user_b_id: str
    user_b_name: str | None
    user_b_avatar: str | None
    item_b_id: str
    item_b_name: str
    item_b_image: str | None
    user_c_id: str
    user_c_name: str | None
    user_c_avatar: str | None
    item_c_id: str
    item_c_name: str
    item_c_image: str | None


class TradeStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class Trade(BaseModel):
    id: str
    proposer_id: str
    receiver_id: str
    offered_item_id: str
    requested_item_id: str
    cash_amount: float | None = None
    status: TradeStatus = TradeStatus.PENDING
    proposer_confirmed: bool = False
    receiver_confirmed: bool = False
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TradeCreate(BaseModel):
    receiver_id: str
    offered_item_id: str
    requested_item_id: str
    cash_amount: float | None = Field(default=None, ge=0)


class ErrorResponse(BaseModel):
    error: str
