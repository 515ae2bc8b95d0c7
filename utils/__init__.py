"""Utility functions for the placement core."""

from .matrix import (
    row_major_to_matrix,
    validate_transform,
    extract_position,
    extract_rotation,
)
from .validation import (
    SceneSnapshot,
    load_snapshot,
    validate_snapshot_data,
)

__all__ = [
    "row_major_to_matrix",
    "validate_transform",
    "extract_position",
    "extract_rotation",
    "SceneSnapshot",
    "load_snapshot",
    "validate_snapshot_data",
]
