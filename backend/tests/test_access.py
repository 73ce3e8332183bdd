from datetime import timedelta

import pytest

from app.exceptions import AccountSuspended, PermissionDenied
from app.models import Match, Ranking, User
from app.services.access import (
    can_create_match,
    can_validate,
    can_view_match,
    ensure_active,
    ensure_can_validate,
)
from app.time_utils import utcnow_naive


def _user(uid: int, role: str = "player", **kw) -> User:
    return User(id=uid, username=f"u{uid}", role=role, **kw)


RANKING = Ranking(id=1, name="Ladder", requires_validation=True, created_by_id=1)


def test_only_admins_validate():
    assert can_validate(_user(1, "admin"), RANKING) is True
    assert can_validate(_user(2), RANKING) is False
    ensure_can_validate(_user(1, "admin"), RANKING)
    with pytest.raises(PermissionDenied) as exc:
        ensure_can_validate(_user(2), RANKING)
    assert exc.value.code == "match_validate_forbidden"


def test_players_record_only_their_own_matches():
    assert can_create_match(_user(2), 2) is True
    assert can_create_match(_user(2), 3) is False
    assert can_create_match(_user(1, "admin"), 3) is True


@pytest.mark.parametrize(
    "status, viewer, expected",
    [
        ("approved", 9, True),
        ("pending", 2, True),
        ("pending", 9, False),
        ("rejected", 3, True),
        ("rejected", 9, False),
    ],
    ids=["approved-anyone", "pending-player1", "pending-outsider", "rejected-player2", "rejected-outsider"],
)
def test_match_visibility(status, viewer, expected):
    match = Match(id=1, ranking_id=1, player1_id=2, player2_id=3, status=status)
    assert can_view_match(_user(viewer), match) is expected


def test_suspended_user_is_refused():
    ensure_active(_user(2, suspended_until=utcnow_naive() - timedelta(minutes=1)))
    with pytest.raises(AccountSuspended):
        ensure_active(_user(2, suspended_until=utcnow_naive() + timedelta(days=1)))
