"""Scoring helpers for recorded match results."""

from . import tennis

__all__ = [
    "tennis",
]
