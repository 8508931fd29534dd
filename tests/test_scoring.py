"""Tests for session scoring and improvement hints."""

from __future__ import annotations

from datetime import datetime, timezone

from speakscore.config import ScoringConfig
from speakscore.models import Score, TaggedSpan, TranscriptEntry, WordCategory
from speakscore.scoring import (
    FILLER_NAMED,
    FILLER_NONE,
    STRONG_PRAISE,
    STRONG_SUGGESTION,
    WEAK_NAMED,
    WEAK_NONE,
    WEAK_UNNAMED,
    SpanCounts,
    improvement_hints,
    score_session,
)
from speakscore.tagger import PhraseTagger

_TS = datetime(2026, 1, 1, tzinfo=timezone.utc)
_TAGGER = PhraseTagger()


def _user(text: str) -> TranscriptEntry:
    return TranscriptEntry(speaker="user", words=tuple(_TAGGER.tag(text)), timestamp=_TS)


def _ai(text: str) -> TranscriptEntry:
    return TranscriptEntry(speaker="ai", words=tuple(_TAGGER.tag(text)), timestamp=_TS)


def _spans(speaker: str, *pairs) -> TranscriptEntry:
    return TranscriptEntry(
        speaker=speaker,  # type: ignore[arg-type]
        words=tuple(TaggedSpan(t, c) for t, c in pairs),
        timestamp=_TS,
    )


def test_empty_transcript_scores_neutral() -> None:
    result = score_session([])

    assert result.score == Score(overall=50, strong=0, weak=0, filler=0)
    assert result.improvements == (STRONG_SUGGESTION, WEAK_NONE, FILLER_NONE)
    assert result.filler_word_counts == {}


def test_ai_speech_is_ignored() -> None:
    result = score_session([_ai("um um I will definitely maybe")])
    assert result.score == Score(overall=50, strong=0, weak=0, filler=0)


def test_weak_phrase_scenario_scores_21() -> None:
    """7 words, 2 weak spans: round(50 - 2/7*100) == 21."""
    result = score_session([_user("i think this is good, i think")])

    assert result.score == Score(overall=21, strong=0, weak=2, filler=0)
    assert result.weak_word_counts == {"i think": 2}
    assert result.improvements[1] == WEAK_NAMED.format(phrase="i think")


def test_multi_word_phrase_counts_all_its_words() -> None:
    """'you know i will' is 4 words: 50 + 150/4 - 50/4 == 75."""
    result = score_session([_user("you know i will")])
    assert result.score == Score(overall=75, strong=1, weak=0, filler=1)


def test_score_clamps_at_100() -> None:
    result = score_session([_user("definitely certainly absolutely")])

    assert result.score.overall == 100
    assert result.improvements[0] == STRONG_PRAISE


def test_score_clamps_at_0() -> None:
    result = score_session([_user("just just just")])
    assert result.score.overall == 0


def test_half_scores_round_up() -> None:
    """3 weak of 8 words gives 12.5 exactly, which rounds to 13."""
    result = score_session([_user("maybe maybe maybe one two three four five")])
    assert result.score.overall == 13


def test_filler_breakdown_names_most_common() -> None:
    entry = _spans(
        "user",
        ("um", WordCategory.FILLER),
        ("um", WordCategory.FILLER),
        ("uh", WordCategory.FILLER),
    )
    result = score_session([entry])

    assert result.filler_word_counts == {"um": 2, "uh": 1}
    assert result.improvements[2] == FILLER_NAMED.format(word="um")


def test_frequency_maps_are_case_folded() -> None:
    result = score_session([_user("Um, um I Think i think")])

    assert result.filler_word_counts == {"um,": 1, "um": 1}
    assert result.weak_word_counts == {"i think": 2}


def test_ties_go_to_first_seen_word() -> None:
    result = score_session([_user("uh um"), _user("like maybe perhaps")])

    assert result.improvements[1] == WEAK_NAMED.format(phrase="maybe")
    assert result.improvements[2] == FILLER_NAMED.format(word="uh")


def test_strong_ratio_at_threshold_is_not_praised() -> None:
    """1 strong span in 10 words is a ratio of exactly 0.1."""
    result = score_session([_user("definitely one two three four five six seven eight nine")])
    assert result.improvements[0] == STRONG_SUGGESTION


def test_blank_spans_are_skipped() -> None:
    entry = _spans("user", ("  ", WordCategory.FILLER), ("ok", WordCategory.NORMAL))
    result = score_session([entry])

    assert result.score == Score(overall=50, strong=0, weak=0, filler=0)
    assert result.filler_word_counts == {}


def test_spans_across_entries_are_aggregated() -> None:
    result = score_session([_user("I will"), _ai("so um"), _user("um okay")])
    assert result.score == Score(overall=63, strong=1, weak=0, filler=2)


def test_custom_weights_apply() -> None:
    cfg = ScoringConfig(neutral_score=60.0, w_filler=100.0)
    result = score_session([_user("um one two three")], cfg)
    assert result.score.overall == 35


def test_weak_count_without_named_phrase_gets_generic_hint() -> None:
    """Not reachable through score_session: the weak map fills with the count."""
    counts = SpanCounts(
        total_words=3,
        strong_count=0,
        weak_count=1,
        filler_count=0,
        weak_word_counts={},
        filler_word_counts={},
    )
    assert improvement_hints(counts, ScoringConfig())[1] == WEAK_UNNAMED
