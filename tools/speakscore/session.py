from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from .config import ScoringConfig
from .feedback import PostureReading, posture_feedback, pronunciation_score
from .models import SESSION_CATEGORIES, SessionMode, SessionSummary, Speaker, TranscriptEntry
from .scoring import score_session
from .tagger import PhraseTagger


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class SessionTranscript:
    """
    In-memory transcript of one coaching session.

    User speech arrives as recognizer updates. Every update re-tags the whole
    current turn (committed phrases + the newest partial text) and replaces the
    spans of the trailing user entry, since a recognizer may revise interim text.
    An AI message closes the user turn.

    Recognizer confidences of final results and, when posture tracking is on,
    posture readings are collected for the end-of-session feedback.
    """

    def __init__(
        self,
        tagger: Optional[PhraseTagger] = None,
        cfg: Optional[ScoringConfig] = None,
        clock: Callable[[], datetime] = _utc_now,
        posture_tracking: bool = False,
    ):
        self.cfg = cfg or (tagger.cfg if tagger is not None else ScoringConfig())
        self.tagger = tagger or PhraseTagger(self.cfg)
        self._clock = clock
        self._entries: List[TranscriptEntry] = []
        self._committed = ""
        self._confidences: List[float] = []
        self._posture: Optional[List[PostureReading]] = [] if posture_tracking else None

    @property
    def entries(self) -> Tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    @property
    def committed_text(self) -> str:
        return self._committed.strip()

    def _entry(self, speaker: Speaker, text: str) -> TranscriptEntry:
        return TranscriptEntry(speaker=speaker, words=tuple(self.tagger.tag(text)), timestamp=self._clock())

    def update_user_speech(self, partial_text: str) -> TranscriptEntry:
        entry = self._entry("user", f"{self._committed} {partial_text or ''}")
        if self._entries and self._entries[-1].speaker == "user":
            self._entries[-1] = entry
        else:
            self._entries.append(entry)
        return entry

    def commit_user_speech(self, final_text: str, confidence: Optional[float] = None) -> TranscriptEntry:
        entry = self.update_user_speech(final_text)
        if confidence is not None and confidence > 0:
            self._confidences.append(float(confidence))
        phrase = (final_text or "").strip()
        if phrase:
            self._committed += phrase + " "
        return entry

    def record_posture(self, reading: PostureReading) -> None:
        if reading not in ("good", "slouching"):
            raise ValueError(f"unknown posture reading: {reading!r}")
        if self._posture is None:
            self._posture = []
        self._posture.append(reading)

    def add_ai_message(self, text: str) -> TranscriptEntry:
        entry = self._entry("ai", text)
        self._entries.append(entry)
        self._committed = ""
        return entry

    def finish(
        self,
        category: str,
        mode: SessionMode = SessionMode.CONVERSATIONAL_AUDIO_ONLY,
        session_id: Optional[str] = None,
        date: Optional[str] = None,
        **feedback: object,
    ) -> SessionSummary:
        """
        Score the session and freeze it into a SessionSummary.

        Blank entries are dropped from the stored transcript. Posture feedback and
        the pronunciation score come from the collected readings and confidences.
        ``feedback`` may carry externally produced results under SessionSummary
        field names (tone, emotion, ...); those win over computed values.
        """
        if category not in SESSION_CATEGORIES:
            raise ValueError(f"unknown session category: {category!r}")
        feedback.setdefault("posture_feedback", posture_feedback(self._posture))
        feedback.setdefault("pronunciation_score", pronunciation_score(self._confidences))
        transcript = tuple(e for e in self._entries if not e.is_blank())
        result = score_session(transcript, self.cfg)
        return SessionSummary(
            id=session_id or uuid.uuid4().hex,
            date=date or self._clock().isoformat(),
            category=category,
            mode=mode,
            score=result.score,
            transcript=transcript,
            improvements=result.improvements,
            filler_word_counts=result.filler_word_counts,
            **feedback,  # type: ignore[arg-type]
        )
