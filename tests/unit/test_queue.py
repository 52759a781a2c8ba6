"""Unit tests for round-based requeueing."""

from __future__ import annotations

import pytest

from auction_house.auction.models import Item, ItemStatus
from auction_house.auction.queue import AuctionQueue, QueueExhausted


def _items(count: int) -> list[Item]:
    return [Item(item_id=i, name=f"Player {i}", base_price=1_000_000) for i in range(1, count + 1)]


class TestAuctionQueue:
    def test_fifo_within_round(self):
        queue = AuctionQueue(_items(3))
        assert [queue.next().item_id for _ in range(3)] == [1, 2, 3]

    def test_next_marks_item_live(self):
        queue = AuctionQueue(_items(1))
        item = queue.next()
        assert item.status == ItemStatus.LIVE
        assert queue.get(1).status == ItemStatus.LIVE

    def test_unsold_waits_for_next_round(self):
        queue = AuctionQueue(_items(3))
        first = queue.next()
        queue.requeue_as_unsold(first)
        assert queue.unsold() == (1,)
        assert queue.pending() == (2, 3)
        assert queue.get(1).status == ItemStatus.UNSOLD
        assert queue.next().item_id == 2
        assert queue.round == 1

    def test_pool_promoted_in_marking_order(self):
        queue = AuctionQueue(_items(3))
        one, two, three = queue.next(), queue.next(), queue.next()
        queue.requeue_as_unsold(three)
        queue.requeue_as_unsold(one)
        promoted = queue.next()
        assert promoted.item_id == 3
        assert queue.round == 2
        assert queue.get(1).status == ItemStatus.AVAILABLE
        assert queue.unsold() == ()
        assert queue.pending() == (1,)
        assert two.item_id == 2

    def test_exhausted_when_queue_and_pool_empty(self):
        queue = AuctionQueue(_items(1))
        queue.next()
        assert not queue.has_remaining()
        with pytest.raises(QueueExhausted):
            queue.next()

    def test_max_rounds_stops_promotion(self):
        queue = AuctionQueue(_items(1), max_rounds=2)
        queue.requeue_as_unsold(queue.next())
        queue.requeue_as_unsold(queue.next())
        assert queue.round == 2
        assert not queue.has_remaining()
        with pytest.raises(QueueExhausted):
            queue.next()
        assert queue.get(1).status == ItemStatus.UNSOLD

    def test_every_item_in_exactly_one_place(self):
        queue = AuctionQueue(_items(4))
        live = queue.next()
        queue.requeue_as_unsold(live)
        live = queue.next()
        pending, unsold = set(queue.pending()), set(queue.unsold())
        assert pending.isdisjoint(unsold)
        assert live.item_id not in pending | unsold
        assert pending | unsold | {live.item_id} == {1, 2, 3, 4}

    def test_update_unknown_item(self):
        queue = AuctionQueue(_items(1))
        with pytest.raises(KeyError):
            queue.update(Item(item_id=99, name="Ghost", base_price=1))
