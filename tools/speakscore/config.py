from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .models import WordCategory


class LexiconError(ValueError):
    pass


@dataclass(frozen=True)
class Lexicon:
    """
    Static phrase sets, lowercase, words separated by single spaces.

    Sets are meant to be disjoint. If a phrase shows up in more than one set,
    category_of() resolves strong, then weak, then filler.
    """

    strong: Tuple[str, ...] = (
        "i will",
        "we will",
        "i am confident",
        "we can achieve",
        "the data shows",
        "my analysis indicates",
        "the solution is",
        "i recommend",
        "we should",
        "the next step is",
        "i have successfully",
        "we delivered",
        "i accomplished",
        "definitely",
        "certainly",
        "without a doubt",
        "absolutely",
        "executed",
        "achieved",
        "spearheaded",
        "delivered",
        "generated",
        "improved",
        "resolved",
        "i propose",
        "the benefit is",
        "the key takeaway is",
        "in conclusion",
    )
    weak: Tuple[str, ...] = (
        "i think",
        "i guess",
        "i feel",
        "maybe",
        "perhaps",
        "possibly",
        "kind of",
        "sort of",
        "a little bit",
        "i might be wrong but",
        "this is just my opinion but",
        "i believe",
        "it seems like",
        "hopefully",
        "i suppose",
        "just",
        "actually",
        "basically",
        "i mean",
        "if that makes sense",
        "am i making sense",
    )
    filler: Tuple[str, ...] = (
        "um",
        "umm",
        "uh",
        "er",
        "ah",
        "like",
        "you know",
        "so",
        "well",
        "right",
        "okay",
        "hmm",
    )

    def category_of(self, phrase: str) -> WordCategory:
        if phrase in self.strong:
            return WordCategory.STRONG
        if phrase in self.weak:
            return WordCategory.WEAK
        if phrase in self.filler:
            return WordCategory.FILLER
        return WordCategory.NORMAL

    def phrases(self) -> Tuple[str, ...]:
        return self.strong + self.weak + self.filler


@dataclass(frozen=True)
class ScoringConfig:
    """
    Tunables for tagging and scoring.

    Notes:
    - overall = baseline + strong_ratio*w_strong - weak_ratio*w_weak - filler_ratio*w_filler
    - ratios are per word of user speech, a matched multi-word phrase counts all its words
    - only the characters in compare_strip_chars are removed before phrase comparison
    """

    lexicon: Lexicon = field(default_factory=Lexicon)

    # Tagging
    compare_strip_chars: str = ",."

    # Score mapping
    neutral_score: float = 50.0
    w_strong: float = 150.0
    w_weak: float = 100.0
    w_filler: float = 50.0
    score_min: float = 0.0
    score_max: float = 100.0

    # Improvements
    strong_ratio_praise_threshold: float = 0.1

    # SRT speaker labels (matched case-insensitively, followed by ":")
    ai_speaker_labels: Tuple[str, ...] = ("ai", "coach", "assistant", "interviewer")
    user_speaker_labels: Tuple[str, ...] = ("user", "me", "speaker", "you")


def normalize_phrase(phrase: str) -> str:
    return " ".join(phrase.lower().split())


def _phrase_tuple(key: str, raw: Any) -> Tuple[str, ...]:
    if raw is None:
        return tuple()
    if not isinstance(raw, list):
        raise LexiconError(f"lexicon key '{key}' must be a list of phrases, got {type(raw).__name__}")
    out = []
    seen = set()
    for item in raw:
        if not isinstance(item, str):
            raise LexiconError(f"lexicon key '{key}' contains a non-string entry: {item!r}")
        phrase = normalize_phrase(item)
        if not phrase:
            raise LexiconError(f"lexicon key '{key}' contains a blank phrase")
        if phrase in seen:
            continue
        seen.add(phrase)
        out.append(phrase)
    return tuple(out)


def lexicon_from_dict(data: Dict[str, Any]) -> Lexicon:
    if not isinstance(data, dict):
        raise LexiconError("lexicon document must be a JSON object")
    return Lexicon(
        strong=_phrase_tuple("strong", data.get("strong")),
        weak=_phrase_tuple("weak", data.get("weak")),
        filler=_phrase_tuple("filler", data.get("filler")),
    )


def load_lexicon(path: Path) -> Lexicon:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise LexiconError(f"invalid lexicon JSON in {path}: {e}") from e
    return lexicon_from_dict(data)


def overlapping_phrases(lexicon: Lexicon) -> Tuple[str, ...]:
    """Phrases present in more than one category set, sorted."""
    counts: Dict[str, int] = {}
    for group in (lexicon.strong, lexicon.weak, lexicon.filler):
        for p in set(group):
            counts[p] = counts.get(p, 0) + 1
    return tuple(sorted(p for p, c in counts.items() if c > 1))


def make_config(lexicon_path: Optional[Path] = None, **overrides: Any) -> ScoringConfig:
    if lexicon_path is None:
        return ScoringConfig(**overrides)
    return ScoringConfig(lexicon=load_lexicon(lexicon_path), **overrides)
