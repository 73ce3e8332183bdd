import pytest

from app.exceptions import ValidationError
from app.services.validation import validate_match_score


def _sets(*pairs):
    return [{"player1Score": a, "player2Score": b} for a, b in pairs]


def test_accepts_valid_score() -> None:
    stored = validate_match_score({"sets": _sets((6, 4), (6, 3))})
    assert stored == {"sets": _sets((6, 4), (6, 3))}


def test_implausible_tennis_scores_are_allowed() -> None:
    # Only shape and range are checked, not tennis rules.
    stored = validate_match_score({"sets": _sets((1, 0), (3, 3))})
    assert len(stored["sets"]) == 2


def test_numeric_strings_and_whole_floats_are_normalised() -> None:
    stored = validate_match_score(
        {"sets": [{"player1Score": "6", "player2Score": 4.0}]}
    )
    assert stored["sets"] == _sets((6, 4))


def test_tiebreak_is_kept() -> None:
    stored = validate_match_score(
        {
            "sets": _sets((7, 6)),
            "tiebreak": {"player1Score": 7, "player2Score": 5},
        },
        has_tiebreak=True,
    )
    assert stored["tiebreak"] == {"player1Score": 7, "player2Score": 5}


def test_unknown_keys_are_dropped() -> None:
    stored = validate_match_score({"sets": _sets((6, 0)), "note": "windy"})
    assert "note" not in stored


@pytest.mark.parametrize(
    "score, msg",
    [
        ({"sets": []}, "At least one set"),
        ({}, "At least one set"),
        ("6-4", "must be an object"),
        ({"sets": "6-4"}, "At least one set"),
        ({"sets": [42]}, "must be an object"),
        ({"sets": [{"player1Score": 6}]}, "include both"),
        ({"sets": _sets((-1, 6))}, ">= 0"),
        ({"sets": _sets(("x", 6))}, "must be an integer"),
        ({"sets": _sets((True, 6))}, "not a boolean"),
        ({"sets": _sets((6.5, 6))}, "must be an integer"),
        ({"sets": _sets((100, 6))}, "<= 99"),
        ({"sets": _sets((6, 4)), "tiebreak": {"player1Score": 7}}, "include both"),
    ],
    ids=[
        "empty",
        "missing-sets",
        "not-an-object",
        "sets-not-a-list",
        "non-dict-set",
        "missing-key",
        "negative",
        "non-integer",
        "boolean",
        "fractional",
        "too-many-games",
        "partial-tiebreak",
    ],
)
def test_rejects_invalid_scores(score, msg) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_match_score(score)
    assert msg.lower() in str(exc.value).lower()
    assert exc.value.status_code == 400


def test_rejects_too_many_sets() -> None:
    with pytest.raises(ValidationError, match="Max allowed is 5"):
        validate_match_score({"sets": _sets(*[(6, 0)] * 6)})


def test_missing_tiebreak_when_one_was_played() -> None:
    with pytest.raises(ValidationError, match="Tiebreak scores are required"):
        validate_match_score({"sets": _sets((7, 6))}, has_tiebreak=True)
