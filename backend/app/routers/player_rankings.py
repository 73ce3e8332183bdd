from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..models import PlayerRanking, User
from ..schemas import PlayerRankingCreate, PlayerRankingOut
from ..services.ledger import enroll_player
from .admin import require_admin

router = APIRouter(prefix="/player-rankings", tags=["rankings"])


def player_ranking_out(entry: PlayerRanking) -> PlayerRankingOut:
    return PlayerRankingOut(
        id=entry.id,
        playerId=entry.player_id,
        rankingId=entry.ranking_id,
        category=entry.category,
        points=entry.points,
        wins=entry.wins,
        losses=entry.losses,
    )


@router.post("", response_model=PlayerRankingOut, status_code=201)
async def create_player_ranking(
    body: PlayerRankingCreate,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> PlayerRankingOut:
    entry = await enroll_player(
        session,
        body.playerId,
        body.rankingId,
        category=body.category,
        points=body.points,
        wins=body.wins,
        losses=body.losses,
    )
    return player_ranking_out(entry)
