from typing import NamedTuple, Optional

from werewolf.models import Role, Room, Winner


class GameResult(NamedTuple):
    winner: Optional[Winner]
    day_count: int


def check_game_over(room: Room) -> GameResult:
    """Villagers win with no werewolves left; werewolves win once they match the rest."""
    alive = room.alive_players()
    werewolves = sum(1 for p in alive if p.role == Role.WEREWOLF)
    others = len(alive) - werewolves

    if werewolves == 0:
        return GameResult(Winner.VILLAGERS, room.day_count)
    if werewolves >= others:
        return GameResult(Winner.WEREWOLVES, room.day_count)
    return GameResult(None, room.day_count)
