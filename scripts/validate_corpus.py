"""scripts.validate_corpus

Validates a template corpus file and prints a per-category summary.

Usage:
  python scripts/validate_corpus.py
  python scripts/validate_corpus.py --corpus /path/to/templates.jsonl
"""

from __future__ import annotations

from layout_ai.env_loader import load_env
import argparse
from layout_ai.corpus.store import TemplateCorpus, validate_frame
from layout_ai.errors import ConfigError
from layout_ai.paths import default_corpus_path


def main() -> int:
    load_env()  # load .env if present
    ap = argparse.ArgumentParser()
    ap.add_argument("--corpus", default=str(default_corpus_path()))
    args = ap.parse_args()

    try:
        df = TemplateCorpus.read_frame(args.corpus)
    except ConfigError as e:
        print(f"ERROR: {e}")
        return 1

    problems = validate_frame(df)
    if problems:
        for p in problems:
            print(f"ERROR: {p}")
        return 1

    corpus = TemplateCorpus.load(args.corpus)
    print(corpus.summary().to_string(index=False))
    print(f"OK: {len(corpus)} templates")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
