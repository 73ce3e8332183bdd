"""Match submission and the pending -> approved/rejected workflow."""

import logging
from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import MatchAlreadyValidated, NotFoundError, SamePlayers, ValidationError
from ..locks import ledger_locks, match_locks
from ..models import Location, Match, MatchStatus, Ranking, User
from ..schemas import MatchCreate
from ..time_utils import to_storage
from .ledger import apply_match_result, match_ledger_keys
from .validation import validate_match_score

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


def initial_status(ranking: Ranking) -> str:
    if ranking.requires_validation:
        return MatchStatus.PENDING.value
    return MatchStatus.APPROVED.value


async def _require(session: AsyncSession, model, resource: str, ident: int):
    row = await session.get(model, ident)
    if row is None:
        raise NotFoundError(resource, ident)
    return row


async def create_match(session: AsyncSession, data: MatchCreate) -> Match:
    """Record a played match.

    Matches in rankings that do not require validation are approved on the
    spot and counted in the ledger within the same transaction; everything
    else waits as ``pending`` for :func:`validate_match`.
    """

    if data.player1Id is None:
        raise ValidationError("player1Id is required", code="match_missing_player")
    if data.player1Id == data.player2Id:
        raise SamePlayers()

    score = validate_match_score(data.score, has_tiebreak=data.hasTiebreak)

    ranking = await _require(session, Ranking, "ranking", data.rankingId)
    await _require(session, User, "player", data.player1Id)
    await _require(session, User, "player", data.player2Id)
    if data.locationId is not None:
        await _require(session, Location, "location", data.locationId)

    match = Match(
        ranking_id=ranking.id,
        player1_id=data.player1Id,
        player2_id=data.player2Id,
        location_id=data.locationId,
        location_name=data.locationName,
        photo_url=data.photoUrl,
        status=initial_status(ranking),
        score=score,
    )
    played_at = to_storage(data.playedAt)
    if played_at is not None:
        match.played_at = played_at

    try:
        if match.status == MatchStatus.APPROVED.value:
            async with ledger_locks.hold(*match_ledger_keys(match)):
                session.add(match)
                await session.flush()
                await apply_match_result(session, match)
                await session.commit()
        else:
            session.add(match)
            await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Recorded match %s in ranking %s (%s vs %s) as %s",
        match.id,
        match.ranking_id,
        match.player1_id,
        match.player2_id,
        match.status,
    )
    return match


async def validate_match(
    session: AsyncSession,
    match_id: int,
    approved: bool,
    rejection_reason: Optional[str] = None,
) -> Match:
    """Approve or reject a pending match.

    Only ``pending`` matches can be validated; anything else raises
    :class:`MatchAlreadyValidated` without touching the match or the ledger,
    so a match is credited at most once.
    """

    async with match_locks.hold(match_id):
        match = await session.get(
            Match, match_id, populate_existing=True, with_for_update=True
        )
        if match is None:
            raise NotFoundError("match", match_id)
        if match.status != MatchStatus.PENDING.value:
            raise MatchAlreadyValidated(match_id, match.status)

        if approved:
            values = {"status": MatchStatus.APPROVED.value, "rejection_reason": None}
        else:
            values = {
                "status": MatchStatus.REJECTED.value,
                "rejection_reason": (rejection_reason or "").strip()
                or DEFAULT_REJECTION_REASON,
            }

        try:
            async with ledger_locks.hold(*match_ledger_keys(match)):
                result = await session.execute(
                    update(Match)
                    .where(
                        Match.id == match_id,
                        Match.status == MatchStatus.PENDING.value,
                    )
                    .values(**values)
                )
                if result.rowcount == 0:
                    # Another worker moved it out of pending first.
                    await session.rollback()
                    current = await session.get(Match, match_id, populate_existing=True)
                    raise MatchAlreadyValidated(
                        match_id, current.status if current else "gone"
                    )
                if approved:
                    await apply_match_result(session, match)
                await session.commit()
        except MatchAlreadyValidated:
            raise
        except Exception:
            await session.rollback()
            raise

    logger.info("Match %s %s", match_id, match.status)
    return match


async def update_rejection_reason(
    session: AsyncSession, match_id: int, reason: str
) -> Match:
    """Edit the reason on a rejected match, the one field that stays mutable."""

    async with match_locks.hold(match_id):
        match = await _require(session, Match, "match", match_id)
        if match.status != MatchStatus.REJECTED.value:
            raise ValidationError(
                "Only rejected matches carry a rejection reason",
                code="match_not_rejected",
            )
        match.rejection_reason = reason.strip() or DEFAULT_REJECTION_REASON
        await session.commit()
    return match


async def get_match(session: AsyncSession, match_id: int) -> Match:
    return await _require(session, Match, "match", match_id)


async def list_matches(
    session: AsyncSession,
    *,
    player_id: Optional[int] = None,
    ranking_id: Optional[int] = None,
    status: Optional[str] = None,
) -> list[Match]:
    """Return matches, most recently played first."""

    stmt = select(Match)
    if player_id is not None:
        stmt = stmt.where(
            or_(Match.player1_id == player_id, Match.player2_id == player_id)
        )
    if ranking_id is not None:
        stmt = stmt.where(Match.ranking_id == ranking_id)
    if status is not None:
        stmt = stmt.where(Match.status == MatchStatus(status).value)
    stmt = stmt.order_by(Match.played_at.desc(), Match.id.desc())
    return list((await session.execute(stmt)).scalars().all())
