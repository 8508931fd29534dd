"""
Tag one utterance and print its spans as JSON.

Reads the text from the positional argument, or from stdin when omitted.
With --score the utterance is also scored as a one-entry user session.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

_THIS_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(_THIS_DIR))

from speakscore.config import make_config  # noqa: E402
from speakscore.models import TranscriptEntry  # noqa: E402
from speakscore.scoring import score_session  # noqa: E402
from speakscore.tagger import PhraseTagger  # noqa: E402


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser()
    ap.add_argument("text", nargs="?")
    ap.add_argument("--lexicon", help="JSON lexicon with strong/weak/filler lists")
    ap.add_argument("--score", action="store_true")
    return ap.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)
    text = args.text if args.text is not None else sys.stdin.read()
    cfg = make_config(Path(args.lexicon) if args.lexicon else None)
    spans = PhraseTagger(cfg).tag(text)

    out: Dict[str, Any] = {"spans": [{"text": s.text, "category": s.category.value} for s in spans]}
    if args.score:
        entry = TranscriptEntry(speaker="user", words=tuple(spans), timestamp=datetime.now(timezone.utc))
        result = score_session([entry], cfg)
        out["score"] = {
            "overall": result.score.overall,
            "strong": result.score.strong,
            "weak": result.score.weak,
            "filler": result.score.filler,
        }
        out["improvements"] = list(result.improvements)
        out["filler_word_counts"] = result.filler_word_counts

    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
