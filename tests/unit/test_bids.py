"""Unit tests for the bid ledger and the increment policy."""

from __future__ import annotations

import pytest

from auction_house.auction.bids import BidLedger, increment_for, next_bid_amount
from auction_house.config import DEFAULT_INCREMENTS


class TestIncrementPolicy:
    def test_first_bid_is_base_price(self):
        assert next_bid_amount(1_500_000, 1_500_000, False, DEFAULT_INCREMENTS) == 1_500_000

    def test_small_increment_below_threshold(self):
        assert next_bid_amount(1_500_000, 1_500_000, True, DEFAULT_INCREMENTS) == 1_600_000
        assert next_bid_amount(2_900_000, 1_500_000, True, DEFAULT_INCREMENTS) == 3_000_000

    def test_large_increment_at_threshold(self):
        """A price of exactly 3,000,000 already uses the larger step."""
        assert next_bid_amount(3_000_000, 1_500_000, True, DEFAULT_INCREMENTS) == 3_200_000

    def test_rules_are_order_independent(self):
        rules = [(3_000_000, 200_000), (0, 100_000)]
        assert increment_for(2_000_000, rules) == 100_000
        assert increment_for(5_000_000, rules) == 200_000


class TestBidLedger:
    def test_empty_ledger_derives_base_price(self):
        ledger = BidLedger(1_500_000)
        assert ledger.price == 1_500_000
        assert ledger.leader is None
        assert len(ledger) == 0

    def test_place_prepends_newest_first(self):
        ledger = BidLedger(1_500_000)
        ledger.place(1, 1_500_000)
        ledger.place(2, 1_600_000)
        assert [bid.team_id for bid in ledger.entries] == [2, 1]
        assert ledger.price == 1_600_000
        assert ledger.leader == 2

    def test_amounts_strictly_increase_oldest_to_newest(self):
        ledger = BidLedger(1_000_000)
        for team, amount in [(1, 1_000_000), (2, 1_100_000), (1, 1_200_000), (3, 1_300_000)]:
            ledger.place(team, amount)
        oldest_first = list(reversed(ledger.entries))
        amounts = [bid.amount for bid in oldest_first]
        assert amounts == sorted(set(amounts))
        assert all(a.team_id != b.team_id for a, b in zip(oldest_first, oldest_first[1:]))

    def test_rejects_opening_bid_below_base(self):
        ledger = BidLedger(1_500_000)
        with pytest.raises(ValueError):
            ledger.place(1, 1_400_000)

    def test_rejects_non_increasing_bid(self):
        ledger = BidLedger(1_500_000)
        ledger.place(1, 1_500_000)
        with pytest.raises(ValueError):
            ledger.place(2, 1_500_000)

    def test_rejects_bid_from_leader(self):
        ledger = BidLedger(1_500_000)
        ledger.place(1, 1_500_000)
        with pytest.raises(ValueError, match="already leading"):
            ledger.place(1, 1_600_000)

    def test_undo_restores_previous_head(self):
        ledger = BidLedger(1_500_000)
        ledger.place(1, 1_500_000)
        ledger.place(2, 1_600_000)
        removed = ledger.undo_last()
        assert removed.team_id == 2
        assert ledger.price == 1_500_000
        assert ledger.leader == 1
        ledger.undo_last()
        assert ledger.price == 1_500_000
        assert ledger.leader is None

    def test_undo_on_empty_ledger(self):
        with pytest.raises(IndexError):
            BidLedger(1_000_000).undo_last()
