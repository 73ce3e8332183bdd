"""Who may see and change what.

Every check is a plain boolean so routers decide how to fail; the ``ensure_*``
helpers raise the matching domain error for the common cases.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import AccountSuspended, PermissionDenied
from ..models import Match, MatchStatus, Ranking, User
from ..time_utils import coerce_utc, is_suspended
from .ledger import get_ledger_entry


def can_manage(user: User) -> bool:
    """Rankings, locations, enrollment and suspensions are admin-only."""
    return user.is_admin


def can_validate(user: User, ranking: Ranking) -> bool:
    """Only admins approve or reject results, whatever the ranking."""
    return user.is_admin


def can_create_match(user: User, player1_id: int) -> bool:
    return user.is_admin or player1_id == user.id


def can_view_match(user: User, match: Match) -> bool:
    if user.is_admin or match.status == MatchStatus.APPROVED.value:
        return True
    return user.id in (match.player1_id, match.player2_id)


async def can_view_ranking(session: AsyncSession, user: User, ranking: Ranking) -> bool:
    """Private rankings are visible to admins and to enrolled players."""
    if ranking.is_public or user.is_admin:
        return True
    return await get_ledger_entry(session, user.id, ranking.id) is not None


def ensure_active(user: User) -> None:
    if is_suspended(user.suspended_until):
        raise AccountSuspended(coerce_utc(user.suspended_until).isoformat())


def ensure_admin(user: User) -> None:
    if not can_manage(user):
        raise PermissionDenied("Admin access required", code="admin_forbidden")


def ensure_can_validate(user: User, ranking: Ranking) -> None:
    if not can_validate(user, ranking):
        raise PermissionDenied(
            "Only administrators can validate matches", code="match_validate_forbidden"
        )


async def ensure_can_view_ranking(
    session: AsyncSession, user: User, ranking: Ranking
) -> None:
    if not await can_view_ranking(session, user, ranking):
        raise PermissionDenied(
            "You don't have access to this ranking", code="ranking_forbidden"
        )
