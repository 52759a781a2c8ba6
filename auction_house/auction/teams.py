"""Team budgets and acquired rosters."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .models import Item, ItemStatus, Team


class TeamLedger:
    def __init__(self, teams: Iterable[Team]) -> None:
        self._teams: dict[int, Team] = {team.team_id: team for team in teams}

    def get(self, team_id: int) -> Team | None:
        return self._teams.get(team_id)

    def all(self) -> list[Team]:
        return list(self._teams.values())

    def remaining(self, team_id: int) -> int:
        return self._teams[team_id].remaining

    def can_afford(self, team_id: int, amount: int) -> bool:
        return self.remaining(team_id) >= amount

    def commit(self, team_id: int, item: Item, price: int) -> Item:
        """Charge ``price`` to the team and return ``item`` marked as sold to it."""
        team = self._teams[team_id]
        if item.item_id in team.players:
            raise ValueError(f"team {team_id} already owns item {item.item_id}")
        if not self.can_afford(team_id, price):
            raise ValueError(f"team {team_id} cannot afford {price}")
        self._teams[team_id] = replace(
            team,
            spent=team.spent + price,
            players=team.players + (item.item_id,),
        )
        return replace(item, status=ItemStatus.SOLD, sold_price=price, team_id=team_id)

    def total_spent(self) -> int:
        return sum(team.spent for team in self._teams.values())
