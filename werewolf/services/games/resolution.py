import logging
import math
from typing import Dict, Optional

from werewolf.models import KILL_ROLE, PROTECT_ROLE, Room

logger = logging.getLogger(__name__)


def resolve_night(room: Room) -> None:
    """Apply the night's actions to ``room`` and clear the ledger.

    All kills land first; protections then set their targets alive
    regardless of whether they were attacked.
    """
    votes = list(room.votes)

    for vote in votes:
        if vote.actor_role != KILL_ROLE:
            continue
        target = room.get_player(vote.target_id)
        if target and target.is_alive:
            target.is_alive = False
            logger.info(f"[night-kill] room={room.code} {vote.actor_id} kills {vote.target_id}")

    for vote in votes:
        if vote.actor_role != PROTECT_ROLE:
            continue
        target = room.get_player(vote.target_id)
        if target:
            target.is_alive = True
            logger.info(f"[night-save] room={room.code} {vote.actor_id} saves {vote.target_id}")

    room.votes.clear()


def resolve_day(room: Room) -> Optional[str]:
    """Eliminate the player voted out by majority, if any.

    Only votes cast by living players count, and only living players can
    be voted out. A candidate needs at least
    ``ceil(alive / 2)`` votes. When several candidates qualify the highest
    tally wins, and equal tallies go to whoever reached the threshold first.
    Returns the eliminated player id or None.
    """
    alive_count = len(room.alive_players())
    threshold = math.ceil(alive_count / 2)

    tallies: Dict[str, int] = {}
    reached_at: Dict[str, int] = {}
    for idx, vote in enumerate(room.votes):
        voter = room.get_player(vote.actor_id)
        if not voter or not voter.is_alive:
            continue
        tallies[vote.target_id] = tallies.get(vote.target_id, 0) + 1
        target = room.get_player(vote.target_id)
        # Dead or unknown targets never become candidates
        if not target or not target.is_alive:
            continue
        if tallies[vote.target_id] >= threshold and vote.target_id not in reached_at:
            reached_at[vote.target_id] = idx

    eliminated = None
    if reached_at:
        eliminated = min(reached_at, key=lambda pid: (-tallies[pid], reached_at[pid]))

    player = room.get_player(eliminated) if eliminated else None
    if player:
        player.is_alive = False
        logger.info(
            f"[day-eliminate] room={room.code} day={room.day_count} {player.name} "
            f"votes={tallies[eliminated]}/{alive_count} needed={threshold}"
        )
    elif tallies:
        logger.info(
            f"[day-none] room={room.code} day={room.day_count} highest={max(tallies.values())} "
            f"needed={threshold} alive={alive_count}"
        )
    else:
        logger.info(f"[day-none] room={room.code} day={room.day_count} no votes cast")

    room.votes.clear()
    return eliminated if player else None
