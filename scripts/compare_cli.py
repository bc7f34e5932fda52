#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
compare_cli.py

Score a recorded attempt against a reference recording and print the verdict,
feedback and suggestions.

Usage:
  python -m scripts.compare_cli --recorded refs/warrior.json --current tries/warrior_01.json
  python -m scripts.compare_cli --recorded refs/squat.npz --current tries/squat.npz --difficulty hard --json

Options:
  --mode pose|movement|auto   Comparison kind (default: auto, from the recordings)
  --difficulty LEVEL          soft | medium | hard (default: medium)
  --json                      Print the raw result as JSON
  --verbose                   Debug logging

Exit codes: 0 match, 1 no match, 2 could not load / mismatched recordings.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

# Ensure repo root on path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from posecore.compare import compare_movement_sequence, compare_poses
from posecore.normalize import validate_movement_sequence, validate_pose_quality
from posecore.posetrack_io import load_recording
from posecore.thresholds import DIFFICULTY_LEVELS

log = logging.getLogger("compare_cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Compare an attempt against a reference pose or movement.")
    p.add_argument("--recorded", required=True, help="Reference recording (.json or .npz)")
    p.add_argument("--current", required=True, help="Attempt recording (.json or .npz)")
    p.add_argument("--mode", choices=["auto", "pose", "movement"], default="auto")
    p.add_argument("--difficulty", choices=list(DIFFICULTY_LEVELS), default="medium")
    p.add_argument("--json", action="store_true", help="Print result as JSON")
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        rec_kind, recorded = load_recording(args.recorded)
        cur_kind, current = load_recording(args.current)
    except (OSError, KeyError, ValueError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    mode = rec_kind if args.mode == "auto" else args.mode
    if rec_kind != mode or cur_kind != mode:
        print(f"[error] recordings are {rec_kind}/{cur_kind}, cannot compare as {mode}", file=sys.stderr)
        return 2
    log.debug("mode=%s difficulty=%s", mode, args.difficulty)

    if mode == "pose":
        quality = validate_pose_quality(recorded)
        result = compare_poses(recorded, current, args.difficulty)
    else:
        quality = validate_movement_sequence(recorded)
        result = compare_movement_sequence(recorded, current, args.difficulty)

    if args.json:
        print(json.dumps({"quality": quality.to_dict(), "result": result.to_dict()}, indent=2))
    else:
        for issue in quality.issues:
            print(f"[quality] reference: {issue}")
        verdict = "MATCH" if result.is_match else "NO MATCH"
        print(f"[compare] {mode} @ {args.difficulty}: {verdict} (score {result.score:.3f})")
        for line in result.feedback:
            print(f"  - {line}")
        print("[tips]")
        for line in result.suggestions:
            print(f"  - {line}")

    return 0 if result.is_match else 1


if __name__ == "__main__":
    raise SystemExit(main())
