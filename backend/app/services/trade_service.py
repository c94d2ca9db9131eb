"""
Trade proposals and their status transitions.

pending -> accepted | rejected, accepted -> completed. rejected and completed
are terminal.
"""

import uuid
from typing import Callable, Dict, List, Optional, Set

from app.exceptions import (
    InvalidTransition,
    PermissionDenied,
    ResourceNotFound,
    StaleTrade,
    ValidationError,
)
from app.models.schemas import Trade, TradeCreate, TradeStatus
from app.store.base import BarterRepository
from app.utils.hasher import get_timestamp
from app.utils.logger import get_logger

logger = get_logger(__name__)

UPDATE_ATTEMPTS = 3

TRANSITIONS: Dict[TradeStatus, Set[TradeStatus]] = {
    TradeStatus.PENDING: {TradeStatus.ACCEPTED, TradeStatus.REJECTED},
    TradeStatus.ACCEPTED: {TradeStatus.COMPLETED},
    TradeStatus.REJECTED: set(),
    TradeStatus.COMPLETED: set(),
}


def check_transition(current: TradeStatus, requested: TradeStatus) -> None:
    if requested not in TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move trade from {current.value} to {requested.value}",
            current=current.value,
            requested=requested.value,
        )


class TradeService:
    def __init__(self, repository: BarterRepository) -> None:
        self.repository = repository

    def _check_items(self, proposer_id: str, receiver_id: str, offered_id: str, requested_id: str) -> None:
        items = self.repository.get_items([offered_id, requested_id])
        offered = items.get(offered_id)
        requested = items.get(requested_id)
        if offered is None:
            raise ResourceNotFound(f"Item '{offered_id}' not found")
        if requested is None:
            raise ResourceNotFound(f"Item '{requested_id}' not found")
        if offered.user_id != proposer_id:
            raise ValidationError("Offered item must belong to the proposer")
        if requested.user_id != receiver_id:
            raise ValidationError("Requested item must belong to the receiver")
        if not offered.is_available:
            raise ValidationError(f"Item '{offered_id}' is no longer available")
        if not requested.is_available:
            raise ValidationError(f"Item '{requested_id}' is no longer available")

    def create_trade(self, proposer_id: str, request: TradeCreate) -> Trade:
        if proposer_id == request.receiver_id:
            raise ValidationError("Cannot propose a trade to yourself")
        if request.cash_amount is not None and request.cash_amount < 0:
            raise ValidationError("Cash amount cannot be negative")
        self._check_items(
            proposer_id, request.receiver_id, request.offered_item_id, request.requested_item_id
        )

        now = get_timestamp()
        trade = Trade(
            id=str(uuid.uuid4()),
            proposer_id=proposer_id,
            receiver_id=request.receiver_id,
            offered_item_id=request.offered_item_id,
            requested_item_id=request.requested_item_id,
            cash_amount=request.cash_amount,
            status=TradeStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        trade = self.repository.insert_trade(trade)
        logger.info("Trade %s proposed by %s to %s", trade.id, proposer_id, request.receiver_id)
        return trade

    def get_trade(self, trade_id: str, user_id: str) -> Trade:
        trade = self.repository.get_trade(trade_id)
        # Other users' trades are reported as missing
        if trade is None or user_id not in (trade.proposer_id, trade.receiver_id):
            raise ResourceNotFound(f"Trade '{trade_id}' not found")
        return trade

    def list_trades(self, user_id: str, status: Optional[TradeStatus] = None) -> List[Trade]:
        return self.repository.trades_for_user(user_id, status)

    def _update(self, trade_id: str, user_id: str, change: Callable[[Trade], Dict]) -> Trade:
        """Apply ``change`` to the latest copy of the trade and write it back.

        ``change`` validates the transition and returns the fields to update.
        When another request wrote the trade in between, the trade is re-read
        and ``change`` runs again against the new state.
        """
        for _ in range(UPDATE_ATTEMPTS):
            trade = self.get_trade(trade_id, user_id)
            changes = change(trade)
            updated = Trade.model_validate(
                {**trade.model_dump(), **changes, "updated_at": get_timestamp()}
            )
            try:
                return self.repository.update_trade(updated, expected=trade)
            except StaleTrade:
                logger.info("Trade %s changed concurrently, retrying", trade_id)
        raise StaleTrade(f"Trade '{trade_id}' keeps changing, try again")

    def _respond(self, trade_id: str, user_id: str, status: TradeStatus) -> Trade:
        def change(trade: Trade) -> Dict:
            if trade.receiver_id != user_id:
                raise PermissionDenied("Only the receiver can respond to a trade")
            check_transition(trade.status, status)
            if status == TradeStatus.ACCEPTED:
                self._check_items(
                    trade.proposer_id, trade.receiver_id, trade.offered_item_id, trade.requested_item_id
                )
            return {"status": status}

        updated = self._update(trade_id, user_id, change)
        logger.info("Trade %s %s by %s", trade_id, status.value, user_id)
        return updated

    def accept(self, trade_id: str, user_id: str) -> Trade:
        return self._respond(trade_id, user_id, TradeStatus.ACCEPTED)

    def reject(self, trade_id: str, user_id: str) -> Trade:
        return self._respond(trade_id, user_id, TradeStatus.REJECTED)

    def confirm_completion(self, trade_id: str, user_id: str) -> Trade:
        """Record one party's confirmation; completes once both have confirmed."""

        def change(trade: Trade) -> Dict:
            if trade.status != TradeStatus.ACCEPTED:
                check_transition(trade.status, TradeStatus.COMPLETED)
            proposer_done = trade.proposer_confirmed or user_id == trade.proposer_id
            receiver_done = trade.receiver_confirmed or user_id == trade.receiver_id
            changes = {"proposer_confirmed": proposer_done, "receiver_confirmed": receiver_done}
            if proposer_done and receiver_done:
                changes["status"] = TradeStatus.COMPLETED
            return changes

        updated = self._update(trade_id, user_id, change)
        if updated.status == TradeStatus.COMPLETED:
            self.repository.mark_unavailable([updated.offered_item_id, updated.requested_item_id])
            logger.info("Trade %s completed", trade_id)
        return updated
