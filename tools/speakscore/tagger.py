from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .config import ScoringConfig
from .models import TaggedSpan, WordCategory


def _tokenize(text: Optional[str]) -> List[str]:
    return (text or "").split()


class PhraseTagger:
    """
    Greedy longest-match phrase tagger.

    The lexicon is bucketed by word count once, at construction. Tagging walks
    the tokens left to right and, at each position, tries the longest bucket
    first. A match emits one span covering all of its tokens; no match emits a
    single NORMAL token.
    """

    def __init__(self, cfg: Optional[ScoringConfig] = None):
        self.cfg = cfg or ScoringConfig()
        self._strip_table = str.maketrans("", "", self.cfg.compare_strip_chars)
        self._buckets: Dict[int, Dict[str, WordCategory]] = {}
        lexicon = self.cfg.lexicon
        for phrase in lexicon.phrases():
            bucket = self._buckets.setdefault(len(phrase.split(" ")), {})
            if phrase not in bucket:
                bucket[phrase] = lexicon.category_of(phrase)
        self._lengths: Tuple[int, ...] = tuple(sorted(self._buckets, reverse=True))

    def _compare_key(self, tokens: List[str]) -> str:
        return " ".join(tokens).lower().translate(self._strip_table)

    def _match_at(self, tokens: List[str], i: int) -> Optional[Tuple[int, WordCategory]]:
        n = len(tokens)
        for length in self._lengths:
            if i + length > n:
                continue
            category = self._buckets[length].get(self._compare_key(tokens[i : i + length]))
            if category is not None:
                return length, category
        return None

    def tag(self, text: Optional[str]) -> List[TaggedSpan]:
        tokens = _tokenize(text)
        spans: List[TaggedSpan] = []
        i = 0
        while i < len(tokens):
            hit = self._match_at(tokens, i)
            if hit is None:
                spans.append(TaggedSpan(text=tokens[i], category=WordCategory.NORMAL))
                i += 1
                continue
            length, category = hit
            spans.append(TaggedSpan(text=" ".join(tokens[i : i + length]), category=category))
            i += length
        return spans


_DEFAULT_TAGGER: Optional[PhraseTagger] = None


def default_tagger() -> PhraseTagger:
    global _DEFAULT_TAGGER
    if _DEFAULT_TAGGER is None:
        _DEFAULT_TAGGER = PhraseTagger()
    return _DEFAULT_TAGGER


def tag_text(text: Optional[str]) -> List[TaggedSpan]:
    return default_tagger().tag(text)
