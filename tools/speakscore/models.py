from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Tuple

Speaker = Literal["user", "ai"]


class WordCategory(str, Enum):
    NORMAL = "normal"
    FILLER = "filler"
    WEAK = "weak"
    STRONG = "strong"


class SessionMode(str, Enum):
    CONVERSATIONAL_AUDIO_ONLY = "CONVERSATIONAL_AUDIO_ONLY"
    CONVERSATIONAL_WITH_VIDEO = "CONVERSATIONAL_WITH_VIDEO"
    CONVERSATIONAL_WITH_DEMO = "CONVERSATIONAL_WITH_DEMO"
    NOTAK_AUDIO_ONLY = "NOTAK_AUDIO_ONLY"
    NOTAK_WITH_VIDEO = "NOTAK_WITH_VIDEO"


SESSION_CATEGORIES: Tuple[str, ...] = ("Interview", "Presentation", "Negotiations", "Feedback Coach")


@dataclass(frozen=True)
class TaggedSpan:
    text: str
    category: WordCategory


@dataclass(frozen=True)
class TranscriptEntry:
    speaker: Speaker
    words: Tuple[TaggedSpan, ...]
    timestamp: datetime

    def is_blank(self) -> bool:
        return not any(w.text.strip() for w in self.words)

    def text(self) -> str:
        return " ".join(w.text for w in self.words)


@dataclass(frozen=True)
class Score:
    overall: int
    strong: int
    weak: int
    filler: int


@dataclass(frozen=True)
class SessionSummary:
    id: str
    date: str
    category: str
    mode: SessionMode
    score: Score
    transcript: Tuple[TranscriptEntry, ...]
    improvements: Tuple[str, ...]
    filler_word_counts: Mapping[str, int] = field(default_factory=dict)
    posture_feedback: str = "Posture analysis was not enabled for this session."
    tone_feedback: str = "AI tone analysis was disabled for this session."
    pronunciation_score: int = 0
    pronunciation_feedback: str = "AI pronunciation analysis was disabled for this session."
    emotion_feedback: str = "AI emotion analysis was disabled for this session."

    def __post_init__(self) -> None:
        # read-only view over a private copy
        object.__setattr__(self, "filler_word_counts", MappingProxyType(dict(self.filler_word_counts)))

    def filler_breakdown(self) -> List[Tuple[str, int]]:
        # sorted() is stable: equal counts keep first-seen order
        return sorted(self.filler_word_counts.items(), key=lambda kv: kv[1], reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "category": self.category,
            "mode": self.mode.value,
            "score": {
                "overall": self.score.overall,
                "strong": self.score.strong,
                "weak": self.score.weak,
                "filler": self.score.filler,
            },
            "transcript": [
                {
                    "speaker": e.speaker,
                    "text": e.text(),
                    "words": [{"text": w.text, "category": w.category.value} for w in e.words],
                    "timestamp": e.timestamp.isoformat(),
                }
                for e in self.transcript
            ],
            "improvements": list(self.improvements),
            "filler_word_counts": dict(self.filler_word_counts),
            "posture_feedback": self.posture_feedback,
            "tone_feedback": self.tone_feedback,
            "pronunciation_score": self.pronunciation_score,
            "pronunciation_feedback": self.pronunciation_feedback,
            "emotion_feedback": self.emotion_feedback,
        }
