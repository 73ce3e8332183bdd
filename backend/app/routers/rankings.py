from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import NotFoundError
from ..models import Ranking, User
from ..schemas import (
    CategoryLiteral,
    RankingCreate,
    RankingOut,
    RankingPlayerOut,
    RankingUpdate,
)
from ..services.access import ensure_can_view_ranking
from ..services.ledger import list_ledger_entries
from .admin import require_admin
from .auth import get_current_user

# Resource-only prefix; no /api or /api/v0 here
router = APIRouter(prefix="/rankings", tags=["rankings"])


def ranking_out(ranking: Ranking) -> RankingOut:
    return RankingOut(
        id=ranking.id,
        name=ranking.name,
        description=ranking.description,
        isPublic=ranking.is_public,
        requiresValidation=ranking.requires_validation,
        createdById=ranking.created_by_id,
    )


async def _get_ranking(session: AsyncSession, rid: int) -> Ranking:
    ranking = await session.get(Ranking, rid)
    if ranking is None:
        raise NotFoundError("ranking", rid)
    return ranking


@router.post("", response_model=RankingOut, status_code=201)
async def create_ranking(
    body: RankingCreate,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> RankingOut:
    ranking = Ranking(
        name=body.name,
        description=body.description,
        is_public=body.isPublic,
        requires_validation=body.requiresValidation,
        created_by_id=admin.id,
    )
    session.add(ranking)
    await session.commit()
    return ranking_out(ranking)


@router.get("", response_model=list[RankingOut])
async def list_rankings(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    stmt = select(Ranking).order_by(Ranking.id)
    if not user.is_admin:
        stmt = stmt.where(Ranking.is_public.is_(True))
    rows = (await session.execute(stmt)).scalars().all()
    return [ranking_out(r) for r in rows]


@router.get("/{rid}", response_model=RankingOut)
async def get_ranking(
    rid: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> RankingOut:
    ranking = await _get_ranking(session, rid)
    await ensure_can_view_ranking(session, user, ranking)
    return ranking_out(ranking)


@router.patch("/{rid}", response_model=RankingOut)
async def update_ranking(
    rid: int,
    body: RankingUpdate,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> RankingOut:
    ranking = await _get_ranking(session, rid)
    data = body.model_dump(exclude_unset=True)
    if "name" in data and data["name"] is not None:
        ranking.name = data["name"]
    if "description" in data:
        ranking.description = data["description"]
    if data.get("isPublic") is not None:
        ranking.is_public = data["isPublic"]
    if data.get("requiresValidation") is not None:
        # Only affects matches submitted from now on.
        ranking.requires_validation = data["requiresValidation"]
    await session.commit()
    return ranking_out(ranking)


# GET /api/v0/rankings/{rid}/players?category=B
@router.get("/{rid}/players", response_model=list[RankingPlayerOut])
async def ranking_players(
    rid: int,
    category: Optional[CategoryLiteral] = Query(None),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    ranking = await _get_ranking(session, rid)
    await ensure_can_view_ranking(session, user, ranking)
    rows = await list_ledger_entries(session, rid, category)
    return [
        RankingPlayerOut(
            playerId=row.player.id,
            username=row.player.username,
            fullName=row.player.full_name,
            photoUrl=row.player.photo_url,
            category=row.entry.category,
            points=row.entry.points,
            position=row.position,
            wins=row.entry.wins,
            losses=row.entry.losses,
            isCurrentUser=row.player.id == user.id,
        )
        for row in rows
    ]
