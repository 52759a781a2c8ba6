"""Operational stats endpoint."""

from __future__ import annotations

from collections import Counter
from typing import Any

from fastapi import APIRouter, Depends, Request

from ..auction.runner import AuctionRunner

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_runner(request: Request) -> AuctionRunner:
    return request.app.state.runner


@router.get("/stats")
async def stats(runner: AuctionRunner = Depends(_get_runner)) -> dict[str, Any]:
    snapshot = runner.snapshot()
    by_status: Counter[str] = Counter(item.status.value for item in snapshot.items)
    total_budget = sum(team.budget for team in snapshot.teams)
    total_spent = sum(team.spent for team in snapshot.teams)
    sold_prices = [item.sold_price for item in snapshot.items if item.sold_price is not None]
    return {
        "round": snapshot.round,
        "state": snapshot.state,
        "total_players": len(snapshot.items),
        "sold_count": by_status["sold"],
        "unsold_count": by_status["unsold"],
        # The live player still counts as up for auction.
        "available_count": by_status["available"] + by_status["live"],
        "total_spent": total_spent,
        "budget_used_ratio": round(total_spent / total_budget, 4) if total_budget else 0.0,
        "highest_sale": max(sold_prices, default=0),
        "current_lot_bids": snapshot.bid_count,
    }
