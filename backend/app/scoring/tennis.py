"""Tennis result evaluation.
Turns a recorded set score into set counts and a winner."""

from typing import Any, Dict, List, Mapping, Sequence, Tuple

PLAYER1_KEY = "player1Score"
PLAYER2_KEY = "player2Score"


def _pair(raw: Any) -> Tuple[int, int]:
    if isinstance(raw, Mapping):
        return int(raw[PLAYER1_KEY]), int(raw[PLAYER2_KEY])
    first, second = raw
    return int(first), int(second)


def set_pairs(score: Mapping[str, Any] | Sequence[Any]) -> List[Tuple[int, int]]:
    """Return ``(player1_games, player2_games)`` for every set.

    Accepts either a stored score document (``{"sets": [...], "tiebreak": ...}``)
    or a bare sequence of sets; each set may be a ``{player1Score,
    player2Score}`` mapping or a two-item pair.
    """
    if isinstance(score, Mapping):
        sets = score.get("sets") or []
    else:
        sets = score
    return [_pair(s) for s in sets]


def count_sets(score: Mapping[str, Any] | Sequence[Any]) -> Dict[str, int]:
    """Count sets won by each side. Drawn sets count for nobody."""
    player1 = player2 = 0
    for p1_games, p2_games in set_pairs(score):
        if p1_games > p2_games:
            player1 += 1
        elif p2_games > p1_games:
            player2 += 1
    return {"player1": player1, "player2": player2}


def is_player1_winner(score: Mapping[str, Any] | Sequence[Any]) -> bool:
    # Equal set counts (including no sets at all) go to player 2.
    counts = count_sets(score)
    return counts["player1"] > counts["player2"]


def summary(score: Mapping[str, Any]) -> Dict[str, Any]:
    counts = count_sets(score)
    return {
        "sets": counts,
        "player1Wins": counts["player1"] > counts["player2"],
        "tiebreak": score.get("tiebreak") if isinstance(score, Mapping) else None,
    }
