from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import pandas as pd
import srt
from tqdm import tqdm

from .config import ScoringConfig, make_config, overlapping_phrases
from .models import SESSION_CATEGORIES, SessionMode, SessionSummary
from .scoring import count_spans
from .srt_io import load_srt_segments, segments_to_session
from .tagger import PhraseTagger

PIPELINE_VERSION = "2026-10-17-phrase-lexicon"

SCORES_CSV = "session_scores.csv"
FULL_JSON = "sessions.full.json"

CSV_COLUMNS = [
    "file_id",
    "transcript_path",
    "processed_at_utc",
    "user_entry_count",
    "ai_entry_count",
    "user_word_count",
    "strong_count",
    "weak_count",
    "filler_count",
    "strong_per_100w",
    "weak_per_100w",
    "filler_per_100w",
    "top_filler",
    "overall",
    "pipeline_version",
]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _jsonify(obj: Any) -> Any:
    if obj is None:
        return None
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(_jsonify(x) for x in obj)
    if isinstance(obj, tuple):
        return [_jsonify(x) for x in obj]
    if isinstance(obj, list):
        return [_jsonify(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _jsonify(v) for k, v in obj.items()}
    return str(obj)


def _per_100(count: int, words: int) -> float:
    if words <= 0:
        return 0.0
    return (count / words) * 100.0


def _list_srt_files(sessions_dir: Path) -> List[Path]:
    return sorted([p for p in sessions_dir.rglob("*.srt") if p.is_file()])


def _file_id_from_path(srt_path: Path) -> str:
    return srt_path.stem


def _duplicate_file_ids(srt_files: List[Path]) -> Dict[str, List[Path]]:
    by_id: Dict[str, List[Path]] = {}
    for p in srt_files:
        by_id.setdefault(_file_id_from_path(p), []).append(p)
    return {fid: paths for fid, paths in by_id.items() if len(paths) > 1}


def score_file(
    srt_path: Path,
    sessions_root: Path,
    tagger: PhraseTagger,
    category: str = "Interview",
    mode: SessionMode = SessionMode.CONVERSATIONAL_AUDIO_ONLY,
) -> Tuple[Dict[str, Any], SessionSummary]:
    segments = load_srt_segments(srt_path)
    session = segments_to_session(segments, tagger=tagger)
    file_id = _file_id_from_path(srt_path)
    summary = session.finish(category=category, mode=mode, session_id=file_id, date=_utc_now_iso())

    counts = count_spans(summary.transcript)
    breakdown = summary.filler_breakdown()
    rel_path = str(srt_path.relative_to(sessions_root)).replace("\\", "/")

    row = {
        "file_id": file_id,
        "transcript_path": rel_path,
        "processed_at_utc": _utc_now_iso(),
        "user_entry_count": sum(1 for e in summary.transcript if e.speaker == "user"),
        "ai_entry_count": sum(1 for e in summary.transcript if e.speaker == "ai"),
        "user_word_count": counts.total_words,
        "strong_count": summary.score.strong,
        "weak_count": summary.score.weak,
        "filler_count": summary.score.filler,
        "strong_per_100w": round(_per_100(counts.strong_count, counts.total_words), 6),
        "weak_per_100w": round(_per_100(counts.weak_count, counts.total_words), 6),
        "filler_per_100w": round(_per_100(counts.filler_count, counts.total_words), 6),
        "top_filler": breakdown[0][0] if breakdown else None,
        "overall": summary.score.overall,
        "pipeline_version": PIPELINE_VERSION,
    }
    return row, summary


def load_existing_csv(path: Path) -> pd.DataFrame:
    if not path.exists():
        return pd.DataFrame(columns=CSV_COLUMNS)
    df = pd.read_csv(path, dtype={"file_id": str})
    for c in CSV_COLUMNS:
        if c not in df.columns:
            df[c] = None
    return df[CSV_COLUMNS]


def _load_existing_full(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"version": 1, "generated_at_utc": None, "config": {}, "sessions": [], "skipped": []}
    data = json.loads(path.read_text(encoding="utf-8"))
    data.setdefault("sessions", [])
    data.setdefault("skipped", [])
    return data


def _merge_rows(df: pd.DataFrame, new_rows: List[Dict[str, Any]]) -> pd.DataFrame:
    if new_rows:
        df_new = pd.DataFrame(new_rows)
        for c in CSV_COLUMNS:
            if c not in df_new.columns:
                df_new[c] = None
        df = pd.concat([df, df_new[CSV_COLUMNS]], ignore_index=True) if len(df) else df_new[CSV_COLUMNS]
    # a re-scored file replaces its older row
    df = df.drop_duplicates(subset=["file_id"], keep="last").copy()
    df["overall"] = pd.to_numeric(df["overall"], errors="coerce")
    df = df.sort_values(["overall", "file_id"], ascending=[False, True], kind="mergesort")
    return df.reset_index(drop=True)


def _write_full_json(
    path: Path,
    cfg: ScoringConfig,
    sessions: List[Dict[str, Any]],
    skipped: List[Dict[str, Any]],
) -> None:
    payload = {
        "version": 1,
        "generated_at_utc": _utc_now_iso(),
        "pipeline_version": PIPELINE_VERSION,
        "config": _jsonify(asdict(cfg)),
        "sessions": _jsonify(sessions),
        "skipped": _jsonify(skipped),
    }
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def run_pipeline(
    sessions_dir: Path,
    public_dir: Path,
    max_new_files: int = 0,
    lexicon_path: Optional[Path] = None,
    category: str = "Interview",
) -> pd.DataFrame:
    """
    Score SRT sessions not yet listed in public_dir/session_scores.csv.

    max_new_files <= 0 means no limit. Files that cannot be read or parsed are
    reported and recorded under "skipped"; they do not stop the batch.
    """
    if category not in SESSION_CATEGORIES:
        raise ValueError(f"unknown session category: {category!r}")
    cfg = make_config(lexicon_path)
    tagger = PhraseTagger(cfg)
    public_dir.mkdir(parents=True, exist_ok=True)

    print(f"[pipeline] version={PIPELINE_VERSION}")
    print(f"[pipeline] sessions_dir={sessions_dir} max_new_files={max_new_files}")
    overlap = overlapping_phrases(cfg.lexicon)
    if overlap:
        print(f"[WARN] phrases in more than one category (strong > weak > filler wins): {', '.join(overlap)}")

    csv_path = public_dir / SCORES_CSV
    full_path = public_dir / FULL_JSON
    df = load_existing_csv(csv_path)
    existing_full = _load_existing_full(full_path)
    sessions_by_id: Dict[str, Dict[str, Any]] = {
        s["id"]: s for s in existing_full["sessions"] if isinstance(s, dict) and s.get("id")
    }
    skipped: List[Dict[str, Any]] = list(existing_full["skipped"])

    srt_files = _list_srt_files(sessions_dir)
    for fid, paths in _duplicate_file_ids(srt_files).items():
        rels = ", ".join(str(p.relative_to(sessions_dir)).replace("\\", "/") for p in paths)
        print(f"[WARN] file_id '{fid}' is shared by {rels}; only the first is scored")

    existing = set(str(x) for x in df["file_id"].dropna().tolist())
    candidates: List[Path] = []
    seen: Set[str] = set()
    for p in srt_files:
        fid = _file_id_from_path(p)
        if fid in existing or fid in seen:
            continue
        seen.add(fid)
        candidates.append(p)
    if max_new_files > 0:
        candidates = candidates[:max_new_files]
    retried = {_file_id_from_path(p) for p in candidates}
    skipped = [s for s in skipped if s.get("file_id") not in retried]

    new_rows: List[Dict[str, Any]] = []
    for p in tqdm(candidates, desc="scoring", unit="file", disable=not candidates):
        fid = _file_id_from_path(p)
        try:
            row, summary = score_file(p, sessions_dir, tagger, category=category)
        except (OSError, srt.SRTParseError) as e:
            print(f"[WARN] {fid} failed: {e}")
            skipped.append(
                {
                    "file_id": fid,
                    "transcript_path": str(p.relative_to(sessions_dir)).replace("\\", "/"),
                    "reason": type(e).__name__,
                    "at_utc": _utc_now_iso(),
                }
            )
            continue
        new_rows.append(row)
        sessions_by_id[fid] = summary.to_dict()
        print(f"[OK] {fid} overall={row['overall']}")

    if not new_rows:
        print("[pipeline] no new sessions to score")

    df = _merge_rows(df, new_rows)
    df.to_csv(csv_path, index=False, encoding="utf-8")
    sessions_sorted = sorted(sessions_by_id.values(), key=lambda s: s["id"])
    _write_full_json(full_path, cfg, sessions_sorted, skipped)

    print(f"[pipeline] wrote {csv_path} and {full_path}")
    return df
