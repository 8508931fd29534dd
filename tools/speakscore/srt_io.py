from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Pattern, Tuple

import srt

from .config import ScoringConfig
from .models import Speaker, TranscriptEntry
from .session import SessionTranscript
from .tagger import PhraseTagger

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class Segment:
    start: float
    end: float
    text: str


def _normalize_text(text: str) -> str:
    return " ".join(text.replace("\n", " ").split()).strip()


def load_srt_segments(path: Path) -> List[Segment]:
    raw = path.read_text(encoding="utf-8-sig", errors="replace")
    segments: List[Segment] = []
    for cue in srt.parse(raw):
        start = cue.start.total_seconds()
        end = cue.end.total_seconds()
        if end <= start:
            continue
        text = _normalize_text(cue.content)
        if not text:
            continue
        segments.append(Segment(start=float(start), end=float(end), text=text))
    segments.sort(key=lambda s: (s.start, s.end))
    return segments


def _label_re(labels: Tuple[str, ...]) -> Pattern[str]:
    alts = "|".join(re.escape(l) for l in sorted(labels, key=len, reverse=True))
    return re.compile(rf"^\s*(?:{alts})\s*:\s*", re.IGNORECASE)


def split_speaker(text: str, cfg: ScoringConfig) -> Tuple[Speaker, str]:
    """
    Speaker from a leading "label:" prefix, label removed.
    Unlabelled cues are the user's.
    """
    m = _label_re(cfg.ai_speaker_labels).match(text)
    if m:
        return "ai", text[m.end() :].strip()
    m = _label_re(cfg.user_speaker_labels).match(text)
    if m:
        return "user", text[m.end() :].strip()
    return "user", text.strip()


class _SegmentClock:
    def __init__(self, base: datetime):
        self.base = base
        self.offset = 0.0

    def __call__(self) -> datetime:
        return self.base + timedelta(seconds=self.offset)


def segments_to_session(
    segments: List[Segment],
    tagger: Optional[PhraseTagger] = None,
    cfg: Optional[ScoringConfig] = None,
    base_time: datetime = _EPOCH,
) -> SessionTranscript:
    """
    Replay SRT cues through a SessionTranscript, as a live recognizer would:
    consecutive user cues extend one turn, an AI cue closes it.
    Entry timestamps are base_time + cue start.
    """
    clock = _SegmentClock(base_time)
    session = SessionTranscript(tagger=tagger, cfg=cfg, clock=clock)
    for seg in segments:
        speaker, text = split_speaker(seg.text, session.cfg)
        if not text:
            continue
        clock.offset = seg.start
        if speaker == "ai":
            session.add_ai_message(text)
        else:
            session.commit_user_speech(text)
    return session


def segments_to_transcript(
    segments: List[Segment],
    tagger: Optional[PhraseTagger] = None,
    cfg: Optional[ScoringConfig] = None,
) -> List[TranscriptEntry]:
    return list(segments_to_session(segments, tagger=tagger, cfg=cfg).entries)
