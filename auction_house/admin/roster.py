"""Read-only views over players and team rosters."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..auction.models import ItemStatus
from ..auction.runner import AuctionRunner

router = APIRouter(tags=["roster"])


def _get_runner(request: Request) -> AuctionRunner:
    return request.app.state.runner


@router.get("/items")
async def items(
    status: ItemStatus | None = Query(default=None),
    runner: AuctionRunner = Depends(_get_runner),
) -> list[dict[str, Any]]:
    return [item.to_dict() for item in runner.engine.items(status)]


@router.get("/teams")
async def teams(runner: AuctionRunner = Depends(_get_runner)) -> list[dict[str, Any]]:
    return [team.to_dict() for team in runner.engine.teams.all()]


@router.get("/teams/{team_id}")
async def team_detail(team_id: int, runner: AuctionRunner = Depends(_get_runner)) -> dict[str, Any]:
    team = runner.engine.teams.get(team_id)
    if team is None:
        raise HTTPException(status_code=404, detail=f"team {team_id} not found")
    engine = runner.engine
    squad = [engine.queue.get(item_id).to_dict() for item_id in team.players]
    leader = engine.ledger.leader if engine.ledger is not None else None
    return {
        **team.to_dict(),
        "squad": squad,
        "is_leading": leader == team_id,
    }
