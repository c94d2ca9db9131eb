"""
Tests for trade proposals and status transitions.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.exceptions import (
    InvalidTransition,
    PermissionDenied,
    ResourceNotFound,
    StaleTrade,
    ValidationError,
)
from app.models.schemas import TradeCreate, TradeStatus
from app.services.trade_service import TradeService
from app.store.memory import InMemoryRepository

from conftest import add_item


@pytest.fixture
def service(three_way_repo: InMemoryRepository) -> TradeService:
    return TradeService(three_way_repo)


def propose(service: TradeService, cash_amount=None):
    return service.create_trade(
        "A",
        TradeCreate(
            receiver_id="B",
            offered_item_id="item1",
            requested_item_id="item2",
            cash_amount=cash_amount,
        ),
    )


def test_create_trade_is_pending(service: TradeService):
    trade = propose(service, cash_amount=15.5)

    assert trade.status == TradeStatus.PENDING
    assert trade.cash_amount == 15.5
    assert (trade.proposer_id, trade.receiver_id) == ("A", "B")
    assert service.get_trade(trade.id, "B") == trade


def test_cannot_trade_with_yourself(service: TradeService):
    with pytest.raises(ValidationError):
        service.create_trade(
            "A", TradeCreate(receiver_id="A", offered_item_id="item1", requested_item_id="item2")
        )


def test_offered_item_must_be_proposers(service: TradeService):
    with pytest.raises(ValidationError):
        service.create_trade(
            "A", TradeCreate(receiver_id="B", offered_item_id="item3", requested_item_id="item2")
        )


def test_requested_item_must_be_receivers(service: TradeService):
    with pytest.raises(ValidationError):
        service.create_trade(
            "A", TradeCreate(receiver_id="B", offered_item_id="item1", requested_item_id="item3")
        )


def test_unavailable_item_cannot_be_offered(service: TradeService, three_way_repo: InMemoryRepository):
    three_way_repo.set_available("item1", False)

    with pytest.raises(ValidationError):
        propose(service)


def test_unknown_item(service: TradeService):
    with pytest.raises(ResourceNotFound):
        service.create_trade(
            "A", TradeCreate(receiver_id="B", offered_item_id="nope", requested_item_id="item2")
        )


def test_negative_cash_rejected(service: TradeService):
    request = TradeCreate.model_construct(
        receiver_id="B", offered_item_id="item1", requested_item_id="item2", cash_amount=-1.0
    )
    with pytest.raises(ValidationError):
        service.create_trade("A", request)


def test_only_receiver_can_accept(service: TradeService):
    trade = propose(service)

    with pytest.raises(PermissionDenied):
        service.accept(trade.id, "A")


def test_outsiders_cannot_see_trade(service: TradeService):
    trade = propose(service)

    with pytest.raises(ResourceNotFound):
        service.get_trade(trade.id, "C")


def test_rejected_is_terminal(service: TradeService):
    trade = propose(service)
    assert service.reject(trade.id, "B").status == TradeStatus.REJECTED

    with pytest.raises(InvalidTransition):
        service.accept(trade.id, "B")
    with pytest.raises(InvalidTransition):
        service.confirm_completion(trade.id, "A")


def test_accept_revalidates_availability(service: TradeService, three_way_repo: InMemoryRepository):
    trade = propose(service)
    three_way_repo.set_available("item2", False)

    with pytest.raises(ValidationError):
        service.accept(trade.id, "B")
    assert service.get_trade(trade.id, "A").status == TradeStatus.PENDING


def test_pending_trade_cannot_complete(service: TradeService):
    trade = propose(service)

    with pytest.raises(InvalidTransition):
        service.confirm_completion(trade.id, "A")


def test_completion_needs_both_parties(service: TradeService, three_way_repo: InMemoryRepository):
    trade = propose(service)
    service.accept(trade.id, "B")

    half = service.confirm_completion(trade.id, "A")
    assert half.status == TradeStatus.ACCEPTED
    assert half.proposer_confirmed and not half.receiver_confirmed

    done = service.confirm_completion(trade.id, "B")
    assert done.status == TradeStatus.COMPLETED
    assert three_way_repo.available_items_owned_by("A") == []
    assert three_way_repo.available_items_owned_by("B") == []

    with pytest.raises(InvalidTransition):
        service.confirm_completion(trade.id, "B")


def test_list_trades_filters_by_status(service: TradeService):
    first = propose(service)
    service.reject(first.id, "B")
    second = propose(service)

    assert {t.id for t in service.list_trades("A")} == {first.id, second.id}
    assert [t.id for t in service.list_trades("B", TradeStatus.PENDING)] == [second.id]
    assert service.list_trades("C") == []


class LockstepRepository(InMemoryRepository):
    """Makes the next two get_trade calls wait for each other, so both
    requests read the same version of a trade before either writes."""

    def __init__(self):
        super().__init__()
        self.barrier = threading.Barrier(2, timeout=5)
        self.held = 0

    def hold_next_reads(self):
        self.held = 2

    def get_trade(self, trade_id):
        trade = super().get_trade(trade_id)
        with self._lock:
            wait = self.held > 0
            if wait:
                self.held -= 1
        if wait:
            self.barrier.wait()
        return trade


@pytest.fixture
def lockstep() -> LockstepRepository:
    repo = LockstepRepository()
    add_item(repo, "item1", "A")
    add_item(repo, "item2", "B")
    return repo


def run_together(*calls):
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(call) for call in calls]
    outcomes = []
    for future in futures:
        error = future.exception()
        outcomes.append(error if error is not None else future.result())
    return outcomes


def test_simultaneous_confirmations_complete_trade(lockstep: LockstepRepository):
    service = TradeService(lockstep)
    trade = propose(service)
    service.accept(trade.id, "B")

    lockstep.hold_next_reads()
    run_together(
        lambda: service.confirm_completion(trade.id, "A"),
        lambda: service.confirm_completion(trade.id, "B"),
    )

    final = service.get_trade(trade.id, "A")
    assert final.status == TradeStatus.COMPLETED
    assert final.proposer_confirmed and final.receiver_confirmed
    assert lockstep.available_items_owned_by("A") == []
    assert lockstep.available_items_owned_by("B") == []


def test_simultaneous_accept_and_reject_only_one_wins(lockstep: LockstepRepository):
    service = TradeService(lockstep)
    trade = propose(service)

    lockstep.hold_next_reads()
    outcomes = run_together(
        lambda: service.accept(trade.id, "B"),
        lambda: service.reject(trade.id, "B"),
    )

    errors = [o for o in outcomes if isinstance(o, Exception)]
    winners = [o for o in outcomes if not isinstance(o, Exception)]
    assert len(winners) == 1
    assert len(errors) == 1 and isinstance(errors[0], InvalidTransition)
    assert service.get_trade(trade.id, "A").status == winners[0].status


def test_stale_write_is_refused(three_way_repo: InMemoryRepository, service: TradeService):
    trade = propose(service)
    service.reject(trade.id, "B")

    accepted = trade.model_copy(update={"status": TradeStatus.ACCEPTED})
    with pytest.raises(StaleTrade):
        three_way_repo.update_trade(accepted, expected=trade)
    assert three_way_repo.get_trade(trade.id).status == TradeStatus.REJECTED
