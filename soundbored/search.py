"""Fuzzy ranking of the sound catalog."""

from collections.abc import Sequence
from dataclasses import dataclass

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from soundbored.catalog_service import Sound

# partial_ratio is 0..100; 60 keeps roughly the matches a 0.4 edit-distance
# threshold would.
SCORE_CUTOFF = 60.0


@dataclass(frozen=True)
class Match:
    sound: Sound
    score: float


def score_matches(
    query: str, catalog: Sequence[Sound], cutoff: float = SCORE_CUTOFF
) -> list[Match]:
    """Score every sound against the query, best first.

    Sorting is stable, so sounds with equal scores keep their catalog order.
    """
    processed = default_process(query)
    if not processed:
        return []

    matches = []
    for sound in catalog:
        score = fuzz.partial_ratio(
            processed, default_process(sound.searchable_text), score_cutoff=cutoff
        )
        if score >= cutoff and score > 0:
            matches.append(Match(sound=sound, score=score))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches


def rank(query: str, catalog: Sequence[Sound]) -> list[Sound]:
    if not query.strip():
        return list(catalog)
    return [m.sound for m in score_matches(query, catalog)]


def filter_exact(query: str, catalog: Sequence[Sound]) -> list[Sound]:
    """Case-insensitive substring match on filename or any tag."""
    needle = query.strip().lower()
    if not needle:
        return list(catalog)
    return [
        s
        for s in catalog
        if needle in s.filename.lower() or any(needle in t.lower() for t in s.tags)
    ]
