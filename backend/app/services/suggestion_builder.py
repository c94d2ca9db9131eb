"""
Shaping of trade cycles into suggested-trade records.
"""

from typing import Dict, List

from app.models.schemas import Item, Profile, SuggestedTrade
from app.services.cycle_detector import TradeCycle


def _user_fields(prefix: str, user_id: str, profiles: Dict[str, Profile]) -> Dict[str, str | None]:
    profile = profiles.get(user_id)
    return {
        f"user_{prefix}_id": user_id,
        f"user_{prefix}_name": profile.name if profile else None,
        f"user_{prefix}_avatar": profile.avatar_url if profile else None,
    }


def _item_fields(prefix: str, item: Item) -> Dict[str, str | None]:
    return {
        f"item_{prefix}_id": item.id,
        f"item_{prefix}_name": item.name,
        f"item_{prefix}_image": item.primary_image,
    }


def build_suggestions(
    anchor: str,
    cycles: List[TradeCycle],
    items: Dict[str, Item],
    profiles: Dict[str, Profile],
) -> List[SuggestedTrade]:
    """Flatten cycles into records, keeping their order."""
    suggestions: List[SuggestedTrade] = []
    for cycle in cycles:
        record = {}
        record.update(_user_fields("a", anchor, profiles))
        record.update(_item_fields("a", items[cycle.item_a]))
        record.update(_user_fields("b", cycle.user_b, profiles))
        record.update(_item_fields("b", items[cycle.item_b]))
        record.update(_user_fields("c", cycle.user_c, profiles))
        record.update(_item_fields("c", items[cycle.item_c]))
        suggestions.append(SuggestedTrade(**record))
    return suggestions
