# backend/app/routers/matches.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import NotFoundError, PermissionDenied
from ..models import Location, Match, Ranking, User
from ..schemas import (
    LocationBriefOut,
    MatchCreate,
    MatchDetailOut,
    MatchOut,
    PlayerBriefOut,
    RankingBriefOut,
    ScoreSummaryOut,
    StatusLiteral,
)
from ..scoring import tennis
from ..services import matches as match_service
from ..services.access import can_create_match, can_view_match, ensure_active
from ..time_utils import coerce_utc
from .auth import get_current_user

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/matches", tags=["matches"])


def match_out(match: Match) -> MatchOut:
    return MatchOut(**_match_fields(match))


def _match_fields(match: Match) -> dict:
    return dict(
        id=match.id,
        rankingId=match.ranking_id,
        player1Id=match.player1_id,
        player2Id=match.player2_id,
        locationId=match.location_id,
        locationName=match.location_name,
        photoUrl=match.photo_url,
        status=match.status,
        rejectionReason=match.rejection_reason,
        playedAt=coerce_utc(match.played_at),
        createdAt=coerce_utc(match.created_at),
        score=match.score,
        summary=ScoreSummaryOut(**tennis.summary(match.score)),
    )


def _player_brief(user: User) -> PlayerBriefOut:
    return PlayerBriefOut(
        id=user.id,
        username=user.username,
        fullName=user.full_name,
        photoUrl=user.photo_url,
    )


async def match_detail_out(
    session: AsyncSession, matches: list[Match]
) -> list[MatchDetailOut]:
    """Attach player, ranking and location summaries to ``matches``."""

    user_ids = {m.player1_id for m in matches} | {m.player2_id for m in matches}
    ranking_ids = {m.ranking_id for m in matches}
    location_ids = {m.location_id for m in matches if m.location_id is not None}

    users: dict[int, User] = {}
    if user_ids:
        rows = (await session.execute(select(User).where(User.id.in_(user_ids)))).scalars()
        users = {u.id: u for u in rows}
    rankings: dict[int, Ranking] = {}
    if ranking_ids:
        rows = (
            await session.execute(select(Ranking).where(Ranking.id.in_(ranking_ids)))
        ).scalars()
        rankings = {r.id: r for r in rows}
    locations: dict[int, Location] = {}
    if location_ids:
        rows = (
            await session.execute(select(Location).where(Location.id.in_(location_ids)))
        ).scalars()
        locations = {loc.id: loc for loc in rows}

    out: list[MatchDetailOut] = []
    for m in matches:
        player1 = users.get(m.player1_id)
        player2 = users.get(m.player2_id)
        ranking = rankings.get(m.ranking_id)
        if not player1 or not player2 or not ranking:
            continue
        location = locations.get(m.location_id) if m.location_id is not None else None
        out.append(
            MatchDetailOut(
                **_match_fields(m),
                player1=_player_brief(player1),
                player2=_player_brief(player2),
                ranking=RankingBriefOut(id=ranking.id, name=ranking.name),
                location=(
                    LocationBriefOut(id=location.id, name=location.name)
                    if location
                    else None
                ),
            )
        )
    return out


# POST /api/v0/matches
@router.post("", response_model=MatchOut, status_code=201)
async def create_match(
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> MatchOut:
    ensure_active(user)
    if body.player1Id is None:
        body = body.model_copy(update={"player1Id": user.id})
    elif not can_create_match(user, body.player1Id):
        raise PermissionDenied(
            "You can only record your own matches", code="match_forbidden"
        )
    match = await match_service.create_match(session, body)
    return match_out(match)


# GET /api/v0/matches?playerId=&rankingId=&status=
@router.get("", response_model=list[MatchDetailOut])
async def list_matches(
    player_id: Optional[int] = Query(None, alias="playerId"),
    ranking_id: Optional[int] = Query(None, alias="rankingId"),
    status: Optional[StatusLiteral] = Query(None),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    # Without a player filter, non-admins only see approved results.
    if not user.is_admin and player_id is None:
        status = "approved"
    matches = await match_service.list_matches(
        session, player_id=player_id, ranking_id=ranking_id, status=status
    )
    return await match_detail_out(session, matches)


# GET /api/v0/matches/{mid}
@router.get("/{mid}", response_model=MatchDetailOut)
async def get_match(
    mid: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    match = await match_service.get_match(session, mid)
    if not can_view_match(user, match):
        raise PermissionDenied(
            "You don't have permission to view this match", code="match_forbidden"
        )
    details = await match_detail_out(session, [match])
    if not details:
        # Dangling references; treat like a missing match.
        raise NotFoundError("match", mid)
    return details[0]
