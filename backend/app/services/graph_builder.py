"""
Trade graph building for suggested trades.

Edges run from an item's owner to a user who likes it, keyed by item id, so a
three-way trade is a directed triangle through the requesting user.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Iterable, List, Optional, Set, Tuple

import networkx as nx

from app.exceptions import DataUnavailable
from app.models.schemas import Item, Like
from app.store.base import ItemLikeRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)

Leg = Tuple[Item, Like]


def add_leg(G: nx.MultiDiGraph, item: Item, like: Like) -> None:
    """Add an owner -> liker edge witnessed by ``item``."""
    if not item.is_available or like.user_id == item.user_id:
        return
    G.add_edge(
        item.user_id,
        like.user_id,
        key=item.id,
        item_id=item.id,
        liked_at=like.created_at,
    )
    G.graph["items"][item.id] = item


def capped_likers(
    repository: ItemLikeRepository, item: Item, fan_out_cap: int
) -> Tuple[List[Like], bool]:
    """Newest likers of an item, at most ``fan_out_cap``; flag set when some were dropped."""
    likes = repository.likers_of(item.id, limit=fan_out_cap + 1)
    if len(likes) > fan_out_cap:
        logger.warning(
            "Item %s has more than %d likers; older likers skipped", item.id, fan_out_cap
        )
        return likes[:fan_out_cap], True
    return likes, False


def expand_branch(
    repository: ItemLikeRepository,
    user_b: str,
    fan_out_cap: int,
    closers: Set[str],
) -> Tuple[List[Leg], List[str]]:
    """Collect B -> C legs for one first-hop user.

    Only likers in ``closers`` (users owning an item the anchor likes) can
    close a triangle, so other legs are pruned here.
    """
    legs: List[Leg] = []
    truncated: List[str] = []
    for item in repository.available_items_owned_by(user_b):
        likes, was_capped = capped_likers(repository, item, fan_out_cap)
        if was_capped:
            truncated.append(item.id)
        legs.extend((item, like) for like in likes if like.user_id in closers)
    return legs, truncated


def build_trade_graph(
    repository: ItemLikeRepository,
    anchor: str,
    fan_out_cap: int = 50,
    max_workers: int = 8,
    timeout: Optional[float] = None,
) -> nx.MultiDiGraph:
    """
    Build the anchor's three-hop trade neighbourhood.

    ``G.graph["items"]`` maps item id to Item for every edge witness and
    ``G.graph["truncated_items"]`` lists items whose likers were capped.
    Raises DataUnavailable when the store fails or ``timeout`` is exceeded.
    """
    deadline = time.monotonic() + timeout if timeout else None
    G = nx.MultiDiGraph(anchor=anchor, items={}, truncated_items=[])
    G.add_node(anchor)

    # First hop: anchor -> B
    first_hop: Set[str] = set()
    for item in repository.available_items_owned_by(anchor):
        likes, was_capped = capped_likers(repository, item, fan_out_cap)
        if was_capped:
            G.graph["truncated_items"].append(item.id)
        for like in likes:
            add_leg(G, item, like)
            if like.user_id != anchor:
                first_hop.add(like.user_id)
    if not first_hop:
        return G

    # Closing hop: C -> anchor
    anchor_likes = repository.liked_by(anchor)
    liked_items = repository.get_items(like.item_id for like in anchor_likes)
    for like in anchor_likes:
        item = liked_items.get(like.item_id)
        if item is not None:
            add_leg(G, item, like)
    closers = {c for c in G.predecessors(anchor) if c != anchor}
    if not closers:
        return G

    # Second hop: B -> C, one branch per B
    _merge_branches(G, repository, sorted(first_hop), fan_out_cap, closers, max_workers, deadline)

    logger.debug(
        "Trade graph for %s: %d users, %d legs", anchor, G.number_of_nodes(), G.number_of_edges()
    )
    return G


def _merge_branches(
    G: nx.MultiDiGraph,
    repository: ItemLikeRepository,
    first_hop: Iterable[str],
    fan_out_cap: int,
    closers: Set[str],
    max_workers: int,
    deadline: Optional[float],
) -> None:
    remaining = None
    if deadline is not None:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DataUnavailable("Timed out building trade graph")

    executor = ThreadPoolExecutor(max_workers=max_workers)
    try:
        futures = [
            executor.submit(expand_branch, repository, user_b, fan_out_cap, closers)
            for user_b in first_hop
        ]
        # Any failing branch fails the whole call; partial graphs are never used
        for future in as_completed(futures, timeout=remaining):
            legs, truncated = future.result()
            for item, like in legs:
                add_leg(G, item, like)
            G.graph["truncated_items"].extend(truncated)
    except FuturesTimeout:
        raise DataUnavailable("Timed out building trade graph")
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
