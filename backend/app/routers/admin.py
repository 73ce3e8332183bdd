import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import NotFoundError
from ..models import Ranking, User
from ..schemas import (
    MatchOut,
    MatchValidateIn,
    RejectionReasonUpdate,
    SuspendedPlayerOut,
    SuspendPlayerIn,
)
from ..services import matches as match_service
from ..services.access import ensure_admin, ensure_can_validate
from ..time_utils import coerce_utc, suspension_end
from .auth import get_current_user
from .matches import match_out

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


async def require_admin(user: User = Depends(get_current_user)) -> User:
    ensure_admin(user)
    return user


# POST /api/v0/admin/validate-match/{mid}
@router.post("/validate-match/{mid}", response_model=MatchOut)
async def validate_match(
    mid: int,
    body: MatchValidateIn,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
) -> MatchOut:
    pending = await match_service.get_match(session, mid)
    ranking = await session.get(Ranking, pending.ranking_id)
    if ranking is None:
        raise NotFoundError("ranking", pending.ranking_id)
    ensure_can_validate(user, ranking)
    match = await match_service.validate_match(
        session, mid, body.approved, body.rejectionReason
    )
    logger.info("User %s validated match %s -> %s", user.id, mid, match.status)
    return match_out(match)


# PATCH /api/v0/admin/matches/{mid}/rejection-reason
@router.patch("/matches/{mid}/rejection-reason", response_model=MatchOut)
async def edit_rejection_reason(
    mid: int,
    body: RejectionReasonUpdate,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> MatchOut:
    match = await match_service.update_rejection_reason(
        session, mid, body.rejectionReason
    )
    return match_out(match)


# POST /api/v0/admin/suspend-player/{uid}
@router.post("/suspend-player/{uid}", response_model=SuspendedPlayerOut)
async def suspend_player(
    uid: int,
    body: SuspendPlayerIn,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> SuspendedPlayerOut:
    player = await session.get(User, uid)
    if player is None:
        raise NotFoundError("player", uid)
    player.suspended_until = suspension_end(body.days)
    await session.commit()
    logger.info(
        "Admin %s suspended player %s until %s", admin.id, uid, player.suspended_until
    )
    return SuspendedPlayerOut(
        id=player.id,
        username=player.username,
        fullName=player.full_name,
        suspendedUntil=coerce_utc(player.suspended_until),
    )
