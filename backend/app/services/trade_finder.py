"""
Suggested three-way trades for a requesting user.
"""

import time
from dataclasses import dataclass, field
from typing import List

from app.config import Settings
from app.models.schemas import SuggestedTrade
from app.services.cycle_detector import find_trade_cycles, get_cycle_users
from app.services.graph_builder import build_trade_graph
from app.services.suggestion_builder import build_suggestions
from app.store.base import ItemLikeRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SuggestionResult:
    suggestions: List[SuggestedTrade] = field(default_factory=list)
    # True when a liker cap or the result cap dropped candidates
    truncated: bool = False


class TradeCycleFinder:
    """Finds trade cycles that start and end with the requesting user.

    Read-only and request scoped: one instance may serve concurrent calls
    for different users.
    """

    def __init__(
        self,
        repository: ItemLikeRepository,
        fan_out_cap: int = 50,
        max_suggestions: int = 200,
        max_workers: int = 8,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.repository = repository
        self.fan_out_cap = fan_out_cap
        self.max_suggestions = max_suggestions
        self.max_workers = max_workers
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, repository: ItemLikeRepository, settings: Settings) -> "TradeCycleFinder":
        return cls(
            repository,
            fan_out_cap=settings.liker_fan_out_cap,
            max_suggestions=settings.max_suggestions,
            max_workers=settings.suggestion_workers,
            timeout_seconds=settings.suggestion_timeout_seconds,
        )

    def find(self, user_id: str) -> SuggestionResult:
        """Return ranked suggestions for ``user_id``.

        Raises DataUnavailable when the store fails or the call times out.
        """
        start_time = time.time()

        G = build_trade_graph(
            self.repository,
            user_id,
            fan_out_cap=self.fan_out_cap,
            max_workers=self.max_workers,
            timeout=self.timeout_seconds,
        )
        cycles = find_trade_cycles(G, user_id)
        truncated = bool(G.graph["truncated_items"])

        if len(cycles) > self.max_suggestions:
            logger.warning(
                "User %s has %d suggestions; returning the first %d",
                user_id,
                len(cycles),
                self.max_suggestions,
            )
            cycles = cycles[: self.max_suggestions]
            truncated = True

        profiles = {}
        if cycles:
            profiles = self.repository.get_profiles(get_cycle_users(cycles) | {user_id})
        suggestions = build_suggestions(user_id, cycles, G.graph["items"], profiles)

        logger.info(
            "Found %d suggested trades for %s in %.3fs (graph: %d users, %d legs%s)",
            len(suggestions),
            user_id,
            time.time() - start_time,
            G.number_of_nodes(),
            G.number_of_edges(),
            ", truncated" if truncated else "",
        )
        return SuggestionResult(suggestions=suggestions, truncated=truncated)
