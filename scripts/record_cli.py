#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
record_cli.py

Record a reference pose or movement from a video file with MediaPipe and
save it as JSON (or NPZ for movements).

Usage:
  python -m scripts.record_cli videos/warrior.mp4 --mode pose --out refs/warrior.json
  python -m scripts.record_cli videos/squat.mp4 --mode movement --duration-ms 10000 --out refs/squat.npz

Requires the video extra: pip install -e ".[video]"
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

# Ensure repo root on path
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from posecore.normalize import validate_movement_sequence, validate_pose_quality
from posecore.pose_extract import (
    PoseDetectionError,
    PoseDetector,
    iter_video_frames,
    record_movement_sequence,
    record_pose,
)
from posecore.posetrack_io import save_json, save_sequence_npz


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Record a reference pose/movement from a video.")
    p.add_argument("video", help="Input video path")
    p.add_argument("--out", required=True, help="Output path (.json, or .npz for movement)")
    p.add_argument("--mode", choices=["pose", "movement"], default="movement")
    p.add_argument("--duration-ms", type=float, default=30000.0, help="Max movement length")
    p.add_argument("--frame-rate", type=float, default=30.0, help="Sampling rate")
    p.add_argument("--min-confidence", type=float, default=0.5, help="Drop frames below this pose confidence")
    p.add_argument("--model-complexity", type=int, default=1, choices=[0, 1, 2])
    p.add_argument("--name", type=str, default=None, help="Activity name stored in the JSON envelope")
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    frames = iter_video_frames(args.video, frame_rate=args.frame_rate)
    try:
        with PoseDetector(model_complexity=args.model_complexity) as det:
            if args.mode == "pose":
                data = record_pose(frames, det, min_pose_confidence=args.min_confidence)
                quality = validate_pose_quality(data)
            else:
                data = record_movement_sequence(
                    frames, det,
                    duration_ms=args.duration_ms,
                    min_pose_confidence=args.min_confidence,
                )
                quality = validate_movement_sequence(data)
    except (ImportError, RuntimeError, PoseDetectionError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 2

    for issue in quality.issues:
        print(f"[quality] {issue}")
    if not data:
        print("[error] nothing recorded", file=sys.stderr)
        return 1

    if args.mode == "movement" and args.out.lower().endswith(".npz"):
        out = save_sequence_npz(args.out, data)
    else:
        meta = {"name": args.name or os.path.splitext(os.path.basename(args.video))[0]}
        out = save_json(args.out, args.mode, data, meta=meta)
    print(f"[save] {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
