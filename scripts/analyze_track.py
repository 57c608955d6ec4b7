"""Print the analysis of a track as JSON.

Usage:
    python scripts/analyze_track.py                  # default track
    python scripts/analyze_track.py my_track.json    # {"outer": [...], "inner": [...], "start_line": {...}}
    python scripts/analyze_track.py --generated      # ignore the hand-tuned line
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from racing_ai.track.analyzer import DegenerateTrackGeometry, TrackAnalyzer  # noqa: E402
from racing_ai.track.tracks import DEFAULT_TRACK  # noqa: E402
from racing_ai.web.schemas import TrackRequest  # noqa: E402
from racing_ai.web.service import DebugService  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Print the analysis of a track as JSON")
    ap.add_argument("path", nargs="?", help="Track geometry JSON (default track if omitted)")
    ap.add_argument("--generated", action="store_true", help="Ignore any hand-placed racing line")
    args = ap.parse_args()

    if args.path:
        req = TrackRequest.model_validate_json(Path(args.path).read_text(encoding="utf-8"))
        track = DebugService.track_from_request(req)
    else:
        track = DEFAULT_TRACK

    racing_line = None if args.generated else track.racing_line
    try:
        analysis = TrackAnalyzer().analyze(track.outer, track.inner, track.start_line, racing_line)
    except DegenerateTrackGeometry as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(analysis.to_dict(), indent=2))


if __name__ == "__main__":
    main()
