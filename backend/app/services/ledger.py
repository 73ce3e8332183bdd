"""Per-ranking player ledger: points, win/loss record and category."""

import logging
from typing import NamedTuple, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ConflictError, NotFoundError
from ..locks import ledger_locks
from ..models import Match, PlayerCategory, PlayerRanking, Ranking, User
from ..scoring.tennis import is_player1_winner

logger = logging.getLogger(__name__)

POINTS_PER_WIN = 10

# Thresholds checked top to bottom; the first matching rule wins and only one
# step is taken per result. The middle item lists the categories a rule
# promotes from.
PROMOTION_RULES: tuple[tuple[int, frozenset[str], str], ...] = (
    (1000, frozenset({"C", "B", "A", "S"}), PlayerCategory.SS.value),
    (500, frozenset({"C", "B", "A"}), PlayerCategory.S.value),
    (250, frozenset({"C"}), PlayerCategory.B.value),
    (100, frozenset({"B"}), PlayerCategory.A.value),
)


class LedgerRow(NamedTuple):
    position: int
    entry: PlayerRanking
    player: User


def ledger_key(player_id: int, ranking_id: int) -> tuple[int, int]:
    return (player_id, ranking_id)


def match_ledger_keys(match: Match) -> list[tuple[int, int]]:
    return [
        ledger_key(match.player1_id, match.ranking_id),
        ledger_key(match.player2_id, match.ranking_id),
    ]


def promote_category(category: str, points: int) -> str:
    """Return the category after one promotion check.

    The first rule whose threshold is met decides the outcome: if that rule
    does not apply to ``category`` the later, lower rules are still tried, but
    never more than one step is taken. A C player on 1000 points goes straight
    to SS; a C player on 100 points stays C; a B player on 250 points moves to
    A.
    """

    for threshold, from_categories, target in PROMOTION_RULES:
        if points >= threshold and category in from_categories:
            return target
    return PlayerCategory(category).value


def record_result(entry: PlayerRanking, won: bool) -> Optional[str]:
    """Apply one match result to ``entry`` in place.

    Returns the new category when the result promoted the player.
    """

    if won:
        entry.points = (entry.points or 0) + POINTS_PER_WIN
        entry.wins = (entry.wins or 0) + 1
    else:
        entry.losses = (entry.losses or 0) + 1

    current = entry.category or PlayerCategory.C.value
    promoted = promote_category(current, entry.points or 0)
    if promoted != current:
        entry.category = promoted
        return promoted
    return None


async def get_ledger_entry(
    session: AsyncSession,
    player_id: int,
    ranking_id: int,
    *,
    for_update: bool = False,
) -> Optional[PlayerRanking]:
    stmt = select(PlayerRanking).where(
        PlayerRanking.player_id == player_id,
        PlayerRanking.ranking_id == ranking_id,
    )
    if for_update:
        stmt = stmt.with_for_update()
    return (await session.execute(stmt)).scalar_one_or_none()


async def _get_or_create_entry(
    session: AsyncSession, player_id: int, ranking_id: int
) -> PlayerRanking:
    entry = await get_ledger_entry(session, player_id, ranking_id, for_update=True)
    if entry is None:
        entry = PlayerRanking(
            player_id=player_id,
            ranking_id=ranking_id,
            category=PlayerCategory.C.value,
            points=0,
            wins=0,
            losses=0,
        )
        session.add(entry)
        try:
            await session.flush()
        except IntegrityError:
            # Created concurrently by another process.
            await session.rollback()
            raise ConflictError(
                "Ranking entry changed concurrently, please retry",
                code="player_ranking_conflict",
            )
    return entry


async def apply_match_result(
    session: AsyncSession, match: Match
) -> dict[int, PlayerRanking]:
    """Credit an approved match to both players' ledger entries.

    Not idempotent: every call counts the match again. Callers hold
    ``ledger_locks`` for :func:`match_ledger_keys` and own the commit, so the
    two entries change together or not at all.
    """

    player1_won = is_player1_winner(match.score or {})
    outcomes = (
        (match.player1_id, player1_won),
        (match.player2_id, not player1_won),
    )

    updated: dict[int, PlayerRanking] = {}
    for player_id, won in outcomes:
        entry = await _get_or_create_entry(session, player_id, match.ranking_id)
        promoted = record_result(entry, won)
        if promoted:
            logger.info(
                "Player %s promoted to %s in ranking %s (%s points)",
                player_id,
                promoted,
                match.ranking_id,
                entry.points,
            )
        updated[player_id] = entry

    await session.flush()
    return updated


async def list_ledger_entries(
    session: AsyncSession,
    ranking_id: int,
    category: Optional[str] = None,
) -> list[LedgerRow]:
    """Return a ranking's table, best first.

    Sorted by points descending; equal points keep enrollment order.
    Positions are 1-based within the (optionally category-filtered) table.
    """

    stmt = (
        select(PlayerRanking, User)
        .join(User, User.id == PlayerRanking.player_id)
        .where(PlayerRanking.ranking_id == ranking_id)
    )
    if category:
        stmt = stmt.where(PlayerRanking.category == PlayerCategory(category).value)
    stmt = stmt.order_by(PlayerRanking.points.desc(), PlayerRanking.id.asc())

    rows: Sequence = (await session.execute(stmt)).all()
    return [
        LedgerRow(position=i, entry=entry, player=player)
        for i, (entry, player) in enumerate(rows, start=1)
    ]


async def enroll_player(
    session: AsyncSession,
    player_id: int,
    ranking_id: int,
    *,
    category: str = PlayerCategory.C.value,
    points: int = 0,
    wins: int = 0,
    losses: int = 0,
) -> PlayerRanking:
    """Create a ledger entry by hand (administrative enrollment)."""

    if await session.get(User, player_id) is None:
        raise NotFoundError("player", player_id)
    if await session.get(Ranking, ranking_id) is None:
        raise NotFoundError("ranking", ranking_id)
    async with ledger_locks.hold(ledger_key(player_id, ranking_id)):
        if await get_ledger_entry(session, player_id, ranking_id) is not None:
            raise ConflictError(
                "Player is already in this ranking",
                code="player_ranking_exists",
            )

        entry = PlayerRanking(
            player_id=player_id,
            ranking_id=ranking_id,
            category=PlayerCategory(category).value,
            points=points,
            wins=wins,
            losses=losses,
        )
        session.add(entry)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise ConflictError(
                "Player is already in this ranking",
                code="player_ranking_exists",
            )
    logger.info("Enrolled player %s into ranking %s as %s", player_id, ranking_id, entry.category)
    return entry
