from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .config import ScoringConfig
from .models import Score, TranscriptEntry, WordCategory

STRONG_PRAISE = "Excellent use of strong, assertive language. Keep it up!"
STRONG_SUGGESTION = (
    "Try to incorporate more assertive phrases like 'I will' or 'the solution is' to convey confidence."
)
WEAK_NAMED = 'You frequently used the weak phrase "{phrase}". Consider replacing it with more direct language.'
WEAK_UNNAMED = "You avoided common weak phrases, which is great. Continue to speak with conviction."
WEAK_NONE = "Fantastic! Your speech was free of weak language, projecting strong confidence."
FILLER_NAMED = (
    'Your most common filler word was "{word}". Try pausing for a moment instead to gather your thoughts.'
)
FILLER_NONE = "Amazing job! You avoided filler words, which made your speech sound polished and professional."


@dataclass(frozen=True)
class SpanCounts:
    total_words: int
    strong_count: int
    weak_count: int
    filler_count: int
    weak_word_counts: Dict[str, int]
    filler_word_counts: Dict[str, int]


@dataclass(frozen=True)
class ScoringResult:
    score: Score
    improvements: Tuple[str, ...]
    filler_word_counts: Dict[str, int]
    weak_word_counts: Dict[str, int]


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _most_common(counts: Dict[str, int]) -> Optional[str]:
    # max() keeps the first key among equal counts (dict insertion order)
    if not counts:
        return None
    return max(counts, key=lambda k: counts[k])


def count_spans(transcript: Iterable[TranscriptEntry]) -> SpanCounts:
    total_words = 0
    strong = weak = filler = 0
    weak_words: Dict[str, int] = {}
    filler_words: Dict[str, int] = {}

    for entry in transcript:
        if entry.speaker != "user":
            continue
        for span in entry.words:
            if not span.text.strip():
                continue
            total_words += len(span.text.split())
            if span.category == WordCategory.STRONG:
                strong += 1
            elif span.category == WordCategory.WEAK:
                weak += 1
                key = span.text.lower()
                weak_words[key] = weak_words.get(key, 0) + 1
            elif span.category == WordCategory.FILLER:
                filler += 1
                key = span.text.lower()
                filler_words[key] = filler_words.get(key, 0) + 1

    return SpanCounts(
        total_words=total_words,
        strong_count=strong,
        weak_count=weak,
        filler_count=filler,
        weak_word_counts=weak_words,
        filler_word_counts=filler_words,
    )


def overall_score(counts: SpanCounts, cfg: ScoringConfig) -> int:
    raw = cfg.neutral_score
    if counts.total_words > 0:
        strong_ratio = counts.strong_count / counts.total_words
        weak_ratio = counts.weak_count / counts.total_words
        filler_ratio = counts.filler_count / counts.total_words
        raw = (
            cfg.neutral_score
            + strong_ratio * cfg.w_strong
            - weak_ratio * cfg.w_weak
            - filler_ratio * cfg.w_filler
        )
    return int(_clamp(_round_half_up(raw), cfg.score_min, cfg.score_max))


def improvement_hints(counts: SpanCounts, cfg: ScoringConfig) -> Tuple[str, ...]:
    """
    Exactly three hints, always in this order: strong, weak, filler.

    A session without words gets the assertive-phrasing suggestion.
    """
    hints = []

    if counts.total_words > 0 and counts.strong_count / counts.total_words > cfg.strong_ratio_praise_threshold:
        hints.append(STRONG_PRAISE)
    else:
        hints.append(STRONG_SUGGESTION)

    top_weak = _most_common(counts.weak_word_counts)
    if top_weak is not None:
        hints.append(WEAK_NAMED.format(phrase=top_weak))
    elif counts.weak_count > 0:
        # unreachable via count_spans: the map fills whenever weak_count does
        hints.append(WEAK_UNNAMED)
    else:
        hints.append(WEAK_NONE)

    top_filler = _most_common(counts.filler_word_counts)
    if top_filler is not None:
        hints.append(FILLER_NAMED.format(word=top_filler))
    else:
        hints.append(FILLER_NONE)

    return tuple(hints)


def score_session(transcript: Iterable[TranscriptEntry], cfg: Optional[ScoringConfig] = None) -> ScoringResult:
    cfg = cfg or ScoringConfig()
    counts = count_spans(transcript)
    score = Score(
        overall=overall_score(counts, cfg),
        strong=counts.strong_count,
        weak=counts.weak_count,
        filler=counts.filler_count,
    )
    return ScoringResult(
        score=score,
        improvements=improvement_hints(counts, cfg),
        filler_word_counts=dict(counts.filler_word_counts),
        weak_word_counts=dict(counts.weak_word_counts),
    )
