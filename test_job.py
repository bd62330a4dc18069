#!/usr/bin/env python3
"""
Test script for the speakertrack API.

Posts a clip to /speakers/track and prints the resolved scenes and speaker
changes. Without --frames, a synthetic two-person conversation is generated:
the speakers take turns every few seconds, so every turn should produce a
speaker change.

Usage:
    python test_job.py                          # Synthetic conversation
    python test_job.py --turns 6 --turn-ms 3000 # Longer conversation
    python test_job.py --frames request.json    # Post a saved request body
"""

import argparse
import json
import math
import os
import time
from pathlib import Path

import httpx
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Configuration
BASE_URL = os.getenv("SPEAKERTRACK_URL", "http://localhost:8000")
API_KEY = os.getenv("SPEAKERTRACK_API_KEY", "")

FRAME_WIDTH = 1280
FRAME_HEIGHT = 720
FPS = 30

LEFT_FACE = {"xmin": 0.15, "ymin": 0.25, "width": 0.2, "height": 0.35}
RIGHT_FACE = {"xmin": 0.65, "ymin": 0.25, "width": 0.2, "height": 0.35}


def face_mesh(bbox: dict, mouth_ratio: float) -> list:
    """Face mesh with only the lip landmarks placed inside `bbox`."""
    cx = bbox["xmin"] + bbox["width"] / 2
    cy = bbox["ymin"] + bbox["height"] * 0.75
    mouth_width = bbox["width"] * 0.3
    # Pixel aspect ratio differs from 1, so convert the gap to y units
    gap = mouth_ratio * mouth_width * FRAME_WIDTH / FRAME_HEIGHT

    points = [[cx, cy]] * 468
    points[78] = [cx - mouth_width / 2, cy]
    points[308] = [cx + mouth_width / 2, cy]
    for offset, (upper, lower) in zip((-0.01, 0.0, 0.01), ((82, 87), (13, 14), (312, 317))):
        points[upper] = [cx + offset, cy - gap / 2]
        points[lower] = [cx + offset, cy + gap / 2]
    return points


def synthetic_conversation(turns: int, turn_ms: int) -> dict:
    """Two faces taking turns; the talking face opens and closes its mouth."""
    frames = []
    frame_ms = 1000 // FPS
    total_ms = turns * turn_ms

    for timestamp_ms in range(0, total_ms, frame_ms):
        speaker = (timestamp_ms // turn_ms) % 2
        phase = 2 * math.pi * timestamp_ms / 250
        talking = 0.35 + 0.25 * math.sin(phase)
        ratios = (talking, 0.05) if speaker == 0 else (0.05, talking)

        frames.append({
            "timestamp_ms": timestamp_ms,
            "faces": [
                {"bbox": LEFT_FACE, "landmarks": face_mesh(LEFT_FACE, ratios[0])},
                {"bbox": RIGHT_FACE, "landmarks": face_mesh(RIGHT_FACE, ratios[1])},
            ],
        })

    return {
        "frame_width": FRAME_WIDTH,
        "frame_height": FRAME_HEIGHT,
        "frames": frames,
        "options": {"min_speaker_span": 1000, "min_shot_span": 1.0},
    }


def submit(payload: dict) -> dict:
    headers = {"Content-Type": "application/json"}
    if API_KEY:
        headers["X-Speakertrack-API-Key"] = API_KEY

    print(f"\nSubmitting {len(payload['frames'])} frames to {BASE_URL}/speakers/track")
    start = time.time()
    response = httpx.post(f"{BASE_URL}/speakers/track", headers=headers, json=payload, timeout=120.0)
    response.raise_for_status()
    print(f"Response received in {time.time() - start:.2f}s")
    return response.json()


def print_summary(result: dict) -> None:
    print(f"\nScenes: {len(result['scenes'])} (server time {result['processing_time_ms']}ms)")
    for scene in result["scenes"]:
        speaker = scene["dominant_speaker_id"]
        label = f"face {speaker}" if speaker is not None else "nobody"
        print(
            f"  {scene['start_timestamp_ms']:>7}ms - {scene['end_timestamp_ms']:>7}ms: "
            f"{label:<8} votes={scene['votes']}"
        )

    changes = [b for b in result["shot_boundaries"] if b["is_speaker_change"]]
    print(f"\nSpeaker changes: {len(changes)}")
    for boundary in changes:
        print(f"  cut at {boundary['timestamp_ms'] / 1000:.2f}s")

    carried = sum(1 for frame in result["frames"] if frame["carried_forward"])
    print(f"\nFrames: {len(result['frames'])} ({carried} carried forward)")


def main():
    parser = argparse.ArgumentParser(description="Test the speakertrack API")
    parser.add_argument("--frames", type=Path, default=None, help="JSON request body to post")
    parser.add_argument("--turns", type=int, default=4, help="Speaker turns in the synthetic clip")
    parser.add_argument("--turn-ms", type=int, default=2500, help="Length of one turn in milliseconds")
    parser.add_argument("--output", type=Path, default=None, help="Write the response JSON here")
    args = parser.parse_args()

    if args.frames:
        payload = json.loads(args.frames.read_text())
    else:
        payload = synthetic_conversation(args.turns, args.turn_ms)

    result = submit(payload)
    print_summary(result)

    if args.output:
        args.output.write_text(json.dumps(result, indent=2))
        print(f"\nResponse written to {args.output}")


if __name__ == "__main__":
    main()
