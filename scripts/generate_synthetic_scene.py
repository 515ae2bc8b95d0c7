#!/usr/bin/env python3
"""
Generate a synthetic scene snapshot of a small room.

Writes a snapshot with a floor, a table top and a back wall (tracked
planes), a low-confidence floor estimate, and two placed objects: a
picture on the wall and a vase on the table. Use it to exercise the
replay CLI without device data.

Usage:
    python scripts/generate_synthetic_scene.py [output_path]

Then replay a tap:
    python -m placement.replay resolve synthetic_scene.json --x 960 --y 700 --infinite
"""

import json
import math
import sys
from pathlib import Path

import numpy as np

from utils.matrix import (
    compose_transform,
    matrix_to_row_major,
    rotation_about_x,
)


# ── Scene layout (metres, ARKit world frame) ─────────────────────────

CAMERA_POSITION = [0.0, 1.5, 1.5]
CAMERA_PITCH = -math.radians(20)  # looking slightly down

FLOOR_Y = 0.0
TABLE_TOP_Y = 0.75
WALL_Z = -3.0

IMAGE_WIDTH = 1920
IMAGE_HEIGHT = 1440
INTRINSICS = [
    1450.0, 0, IMAGE_WIDTH / 2,
    0, 1450.0, IMAGE_HEIGHT / 2,
    0, 0, 1,
]

# Vertical planes stand up from the X-Z plane: local +Y (normal) → world +Z
WALL_ROTATION = rotation_about_x(math.pi / 2)


def _transform(position, rotation=None):
    return matrix_to_row_major(compose_transform(rotation, np.array(position, dtype=float)))


def build_snapshot() -> dict:
    """Assemble the snapshot dictionary."""
    camera = {
        "intrinsic_matrix": INTRINSICS,
        "image_width": IMAGE_WIDTH,
        "image_height": IMAGE_HEIGHT,
        "transform_matrix": _transform(CAMERA_POSITION, rotation_about_x(CAMERA_PITCH)),
    }

    planes = [
        {
            "anchor_id": "floor",
            "transform_matrix": _transform([0.0, FLOOR_Y, -1.0]),
            "extent": [4.0, 4.0],
            "alignment": "horizontal",
        },
        {
            "anchor_id": "table",
            "transform_matrix": _transform([0.0, TABLE_TOP_Y, -1.0]),
            "extent": [1.2, 0.7],
            "alignment": "horizontal",
        },
        {
            "anchor_id": "back-wall",
            "transform_matrix": _transform([0.0, 1.25, WALL_Z], WALL_ROTATION),
            "extent": [4.0, 2.5],
            "alignment": "vertical",
        },
    ]

    estimates = [
        {
            "alignment": "horizontal",
            "transform_matrix": _transform([0.0, FLOOR_Y + 0.02, 0.0]),
        },
    ]

    nodes = [
        {
            "name": "picture",
            "bounds_min": [-0.4, 1.2, WALL_Z],
            "bounds_max": [0.4, 1.8, WALL_Z + 0.05],
        },
        {
            "name": "picture-frame",
            "bounds_min": [-0.45, 1.15, WALL_Z],
            "bounds_max": [0.45, 1.85, WALL_Z + 0.06],
            "parent": "picture",
        },
        {
            "name": "vase",
            "bounds_min": [-0.1, TABLE_TOP_Y, -1.1],
            "bounds_max": [0.1, TABLE_TOP_Y + 0.3, -0.9],
        },
    ]

    objects = [
        {
            "object_id": "picture",
            "transform_matrix": _transform([0.0, 1.5, WALL_Z + 0.01], WALL_ROTATION),
            "node": "picture",
        },
        {
            "object_id": "vase",
            "transform_matrix": _transform([0.0, TABLE_TOP_Y, -1.0]),
            "node": "vase",
        },
    ]

    return {
        "scene_id": "synthetic-room",
        "camera": camera,
        "planes": planes,
        "estimates": estimates,
        "nodes": nodes,
        "objects": objects,
    }


def main():
    output_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("synthetic_scene.json")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(build_snapshot(), f, indent=2)

    print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
