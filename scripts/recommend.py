"""scripts.recommend

Runs one recommendation and prints the camelCase JSON response.

Usage:
  python scripts/recommend.py "I need a weekly planner for my work projects"
  python scripts/recommend.py "habit tracker" --user alice --max-results 3 --alternatives --debug
"""

from __future__ import annotations

from layout_ai.env_loader import load_env
import argparse
import json
from layout_ai.config import Settings
from layout_ai.contracts.models import response_to_dict
from layout_ai.main import build_service


def main() -> int:
    load_env()  # load .env if present
    ap = argparse.ArgumentParser()
    ap.add_argument("prompt")
    ap.add_argument("--user", default=None)
    ap.add_argument("--max-results", type=int, default=None)
    ap.add_argument("--personalization", choices=["low", "medium", "high"], default=None)
    ap.add_argument("--alternatives", action="store_true")
    ap.add_argument("--no-learning", action="store_true")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    payload = {
        "prompt": args.prompt,
        "userId": args.user,
        "options": {
            "maxResults": args.max_results,
            "personalizationLevel": args.personalization,
            "includeAlternatives": args.alternatives,
            "learningMode": not args.no_learning,
            "debug": args.debug,
        },
    }
    service = build_service(Settings.load())
    try:
        resp = service.recommend(payload)
    finally:
        service.close()
    print(json.dumps(response_to_dict(resp), indent=2, default=str))
    return 0 if resp.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
