"""Tests for the batch scoring pipeline."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from speakscore.pipeline import FULL_JSON, SCORES_CSV, run_pipeline

STRONG_SRT = """1
00:00:00,000 --> 00:00:02,000
I will deliver. Definitely.
"""

FILLER_SRT = """1
00:00:00,000 --> 00:00:01,000
AI: How was it?

2
00:00:01,500 --> 00:00:03,000
um, uh, okay
"""


def _write_sessions(root: Path) -> Path:
    sessions = root / "sessions"
    (sessions / "week1").mkdir(parents=True)
    (sessions / "week1" / "alpha.srt").write_text(STRONG_SRT, encoding="utf-8")
    (sessions / "beta.srt").write_text(FILLER_SRT, encoding="utf-8")
    (sessions / "gamma.srt").write_text("this is not a subtitle file\n", encoding="utf-8")
    return sessions


def test_pipeline_scores_and_skips_broken_files(tmp_path: Path) -> None:
    sessions = _write_sessions(tmp_path)
    public = tmp_path / "public"

    df = run_pipeline(sessions, public)

    assert list(df["file_id"]) == ["alpha", "beta"]
    assert list(df["overall"]) == [100, 0]
    assert df.loc[1, "top_filler"] == "um,"
    assert df.loc[0, "transcript_path"] == "week1/alpha.srt"

    on_disk = pd.read_csv(public / SCORES_CSV, dtype={"file_id": str})
    assert list(on_disk["file_id"]) == ["alpha", "beta"]

    full = json.loads((public / FULL_JSON).read_text(encoding="utf-8"))
    assert [s["id"] for s in full["sessions"]] == ["alpha", "beta"]
    assert [s["file_id"] for s in full["skipped"]] == ["gamma"]
    assert full["sessions"][1]["filler_word_counts"] == {"um,": 1, "uh,": 1, "okay": 1}
    assert full["config"]["lexicon"]["filler"][0] == "um"


def test_pipeline_is_incremental(tmp_path: Path) -> None:
    sessions = _write_sessions(tmp_path)
    public = tmp_path / "public"

    first = run_pipeline(sessions, public, max_new_files=1)
    assert list(first["file_id"]) == ["beta"]

    second = run_pipeline(sessions, public)
    assert sorted(second["file_id"]) == ["alpha", "beta"]

    third = run_pipeline(sessions, public)
    assert len(third) == 2
    full = json.loads((public / FULL_JSON).read_text(encoding="utf-8"))
    assert [s["file_id"] for s in full["skipped"]] == ["gamma"]


def test_pipeline_uses_custom_lexicon(tmp_path: Path) -> None:
    """Only "deliver." matches (period ignored); "I will" is plain text here."""
    sessions = tmp_path / "sessions"
    sessions.mkdir()
    (sessions / "one.srt").write_text(STRONG_SRT, encoding="utf-8")
    lexicon = tmp_path / "lexicon.json"
    lexicon.write_text(json.dumps({"filler": ["deliver"]}), encoding="utf-8")

    df = run_pipeline(sessions, tmp_path / "public", lexicon_path=lexicon)

    assert df.loc[0, "strong_count"] == 0
    assert df.loc[0, "filler_count"] == 1
    assert df.loc[0, "overall"] == 38


def test_pipeline_warns_on_shared_file_id(tmp_path: Path, capsys) -> None:
    sessions = tmp_path / "sessions"
    (sessions / "week1").mkdir(parents=True)
    (sessions / "week2").mkdir(parents=True)
    (sessions / "week1" / "intro.srt").write_text(STRONG_SRT, encoding="utf-8")
    (sessions / "week2" / "intro.srt").write_text(FILLER_SRT, encoding="utf-8")

    df = run_pipeline(sessions, tmp_path / "public")

    out = capsys.readouterr().out
    assert "[WARN] file_id 'intro' is shared by week1/intro.srt, week2/intro.srt" in out
    assert list(df["transcript_path"]) == ["week1/intro.srt"]


def test_pipeline_rejects_unknown_category(tmp_path: Path) -> None:
    sessions = _write_sessions(tmp_path)
    with pytest.raises(ValueError):
        run_pipeline(sessions, tmp_path / "public", category="Small Talk")
