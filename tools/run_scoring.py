"""
Run session scoring pipeline.

Env:
- SESSIONS_DIR (default: sessions)
- PUBLIC_DIR (default: public)
- MAX_NEW_FILES (default: 0 = no limit)
- LEXICON_PATH (optional JSON with "strong"/"weak"/"filler" phrase lists)
- SESSION_CATEGORY (default: Interview)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

_THIS_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(_THIS_DIR))

from speakscore.pipeline import run_pipeline  # noqa: E402


def main() -> None:
    sessions_dir = Path(os.getenv("SESSIONS_DIR", "sessions")).resolve()
    public_dir = Path(os.getenv("PUBLIC_DIR", "public")).resolve()
    if not sessions_dir.exists():
        raise SystemExit(f"Missing SESSIONS_DIR: {sessions_dir}")

    lexicon_env = (os.getenv("LEXICON_PATH") or "").strip()
    lexicon_path = Path(lexicon_env).resolve() if lexicon_env else None

    run_pipeline(
        sessions_dir=sessions_dir,
        public_dir=public_dir,
        max_new_files=int(os.getenv("MAX_NEW_FILES", "0")),
        lexicon_path=lexicon_path,
        category=os.getenv("SESSION_CATEGORY", "Interview"),
    )


if __name__ == "__main__":
    main()
