"""Fuzzy matcher — ranking, thresholds, determinism."""

from soundbored.catalog_service import Sound
from soundbored.search import SCORE_CUTOFF, filter_exact, rank, score_matches


def test_horn_matches_only_airhorn():
    catalog = [
        Sound(id=1, filename="airhorn.wav", tags=("meme",)),
        Sound(id=2, filename="applause.wav"),
    ]
    assert rank("horn", catalog) == [catalog[0]]


def test_empty_query_is_identity(sounds):
    assert rank("", sounds) == sounds
    assert rank("   ", sounds) == sounds


def test_empty_query_returns_a_copy(sounds):
    result = rank("", sounds)
    result.pop()
    assert len(sounds) == 4


def test_matching_is_case_insensitive(sounds):
    assert rank("AIRHORN", sounds) == rank("airhorn", sounds)


def test_tags_are_searched(sounds):
    result = rank("suspense", sounds)
    assert result[0].filename == "drumroll.wav"


def test_ranking_is_deterministic(sounds):
    first = rank("meme", sounds)
    for _ in range(5):
        assert rank("meme", sounds) == first


def test_ties_keep_catalog_order(sounds):
    # Both sounds tagged "meme" score a perfect partial match.
    result = rank("meme", sounds)
    assert [s.id for s in result[:2]] == [1, 3]


def test_scores_are_descending_and_above_cutoff(sounds):
    matches = score_matches("roll", sounds)
    scores = [m.score for m in matches]
    assert scores == sorted(scores, reverse=True)
    assert all(score >= SCORE_CUTOFF for score in scores)
    assert matches[0].sound.filename == "drumroll.wav"


def test_no_match_returns_empty(sounds):
    assert rank("zzzzqqq", sounds) == []


def test_punctuation_only_query_matches_nothing(sounds):
    assert rank("!!!", sounds) == []


def test_filter_exact_matches_filename_or_tag(sounds):
    assert [s.id for s in filter_exact("MEME", sounds)] == [1, 3]
    assert [s.id for s in filter_exact("trom", sounds)] == [3]
    assert filter_exact("", sounds) == sounds
