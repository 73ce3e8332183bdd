from typing import Any, Dict, Mapping, Optional

from ..exceptions import ValidationError
from ..scoring.tennis import PLAYER1_KEY, PLAYER2_KEY

DEFAULT_MAX_SETS = 5
DEFAULT_MAX_GAMES = 99


def _games(value: Any, label: str) -> int:
    # Reject booleans explicitly (bool is a subclass of int in Python)
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be an integer (not a boolean).")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{label} must be an integer.")
    try:
        games = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be an integer.")
    if games < 0:
        raise ValidationError(f"{label} must be >= 0.")
    return games


def _score_pair(
    raw: Any, label: str, *, max_games: Optional[int]
) -> Dict[str, int]:
    if not isinstance(raw, Mapping):
        raise ValidationError(
            f"{label} must be an object with fields {PLAYER1_KEY} and {PLAYER2_KEY}."
        )
    if PLAYER1_KEY not in raw or PLAYER2_KEY not in raw:
        raise ValidationError(f"{label} must include both {PLAYER1_KEY} and {PLAYER2_KEY}.")

    p1 = _games(raw[PLAYER1_KEY], f"{label} {PLAYER1_KEY}")
    p2 = _games(raw[PLAYER2_KEY], f"{label} {PLAYER2_KEY}")
    if max_games is not None and (p1 > max_games or p2 > max_games):
        raise ValidationError(f"{label} scores must be <= {max_games}.")
    return {PLAYER1_KEY: p1, PLAYER2_KEY: p2}


def validate_match_score(
    score: Any,
    *,
    has_tiebreak: bool = False,
    max_sets: Optional[int] = DEFAULT_MAX_SETS,
    max_games: Optional[int] = DEFAULT_MAX_GAMES,
) -> Dict[str, Any]:
    """Validate a submitted score and return it in stored form.

    Rules:
    - ``score`` is an object with a ``sets`` list holding at least one set
    - Number of sets must be <= ``max_sets`` (if provided)
    - Each set is ``{player1Score, player2Score}`` with integers >= 0
    - When ``has_tiebreak`` is set, ``tiebreak`` must carry both scores; a
      supplied ``tiebreak`` is always checked the same way

    Tennis plausibility (6-4, 7-5, ...) is deliberately not enforced.
    """

    if not isinstance(score, Mapping):
        raise ValidationError("Score must be an object with a list of sets.")

    sets = score.get("sets")
    if not isinstance(sets, list) or len(sets) == 0:
        raise ValidationError("At least one set is required.")
    if max_sets is not None and len(sets) > max_sets:
        raise ValidationError(f"Too many sets. Max allowed is {max_sets}.")

    normalized_sets = [
        _score_pair(s, f"Set #{i}", max_games=max_games)
        for i, s in enumerate(sets, start=1)
    ]

    raw_tiebreak = score.get("tiebreak")
    tiebreak: Optional[Dict[str, int]] = None
    if raw_tiebreak is not None:
        tiebreak = _score_pair(raw_tiebreak, "Tiebreak", max_games=None)
    elif has_tiebreak:
        raise ValidationError("Tiebreak scores are required when a tiebreak was played.")

    stored: Dict[str, Any] = {"sets": normalized_sets}
    if tiebreak is not None:
        stored["tiebreak"] = tiebreak
    return stored
