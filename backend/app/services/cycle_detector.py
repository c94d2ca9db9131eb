"""
Three-way trade cycle detection.
"""

from datetime import datetime
from typing import Iterable, List, NamedTuple, Set

import networkx as nx


class TradeCycle(NamedTuple):
    """anchor gives item_a to user_b, user_b gives item_b to user_c, user_c gives item_c to anchor."""

    user_b: str
    user_c: str
    item_a: str
    item_b: str
    item_c: str
    liked_at: datetime

    @property
    def key(self):
        return (self.user_b, self.user_c, self.item_a, self.item_b, self.item_c)


def find_trade_cycles(G: nx.MultiDiGraph, anchor: str) -> List[TradeCycle]:
    """
    Find every directed triangle anchor -> B -> C -> anchor.

    Users must be pairwise distinct and each leg must be witnessed by a
    different item. Each cycle appears once, ranked by ``rank_cycles``.
    """
    if anchor not in G:
        return []

    cycles: List[TradeCycle] = []
    seen = set()

    for user_b, legs_ab in G[anchor].items():
        if user_b == anchor:
            continue
        for user_c, legs_bc in G[user_b].items():
            if user_c in (anchor, user_b):
                continue
            legs_ca = G[user_c].get(anchor)
            if not legs_ca:
                continue
            for item_a, leg_ab in legs_ab.items():
                for item_b in legs_bc:
                    for item_c in legs_ca:
                        if len({item_a, item_b, item_c}) < 3:
                            continue
                        key = (user_b, user_c, item_a, item_b, item_c)
                        if key in seen:
                            continue
                        seen.add(key)
                        cycles.append(TradeCycle(*key, liked_at=leg_ab["liked_at"]))

    return rank_cycles(cycles)


def rank_cycles(cycles: Iterable[TradeCycle]) -> List[TradeCycle]:
    """Newest like on the anchor's item first, then ids lexicographically."""
    ranked = sorted(cycles, key=lambda c: c.key)
    # stable sort keeps the id order among equal timestamps
    ranked.sort(key=lambda c: c.liked_at, reverse=True)
    return ranked


def get_cycle_users(cycles: Iterable[TradeCycle]) -> Set[str]:
    """All B and C users that appear in any cycle."""
    users: Set[str] = set()
    for cycle in cycles:
        users.update((cycle.user_b, cycle.user_c))
    return users
