"""Validation utilities for scene snapshot files."""

import json
from pathlib import Path
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator
import numpy as np

from .matrix import row_major_to_matrix, validate_transform


# Pydantic models for scene snapshot validation

VALID_ALIGNMENTS = {"horizontal", "vertical"}


def _check_transform(v: List[float]) -> List[float]:
    if len(v) != 16:
        raise ValueError("Transform matrix must have exactly 16 elements")
    if not validate_transform(row_major_to_matrix(v)):
        raise ValueError("Invalid transformation matrix")
    return v


def _check_alignment(v: str) -> str:
    if v not in VALID_ALIGNMENTS:
        raise ValueError(f"Invalid alignment: {v}. Must be one of {VALID_ALIGNMENTS}")
    return v


class CameraEntry(BaseModel):
    intrinsic_matrix: List[float] = Field(..., min_length=9, max_length=9)
    image_width: int = Field(..., gt=0)
    image_height: int = Field(..., gt=0)
    transform_matrix: List[float] = Field(..., min_length=16, max_length=16)

    @field_validator("intrinsic_matrix")
    @classmethod
    def validate_intrinsics(cls, v):
        K = np.array(v).reshape(3, 3)
        if K[0, 0] <= 0 or K[1, 1] <= 0:
            raise ValueError("Focal lengths must be positive")
        return v

    @field_validator("transform_matrix")
    @classmethod
    def validate_transform_matrix(cls, v):
        return _check_transform(v)


class PlaneEntry(BaseModel):
    anchor_id: str
    transform_matrix: List[float] = Field(..., min_length=16, max_length=16)
    extent: List[float] = Field(..., min_length=2, max_length=2)
    alignment: str

    @field_validator("transform_matrix")
    @classmethod
    def validate_transform_matrix(cls, v):
        return _check_transform(v)

    @field_validator("extent")
    @classmethod
    def validate_extent(cls, v):
        if any(e <= 0 for e in v):
            raise ValueError("Plane extent must be positive")
        return v

    @field_validator("alignment")
    @classmethod
    def validate_alignment(cls, v):
        return _check_alignment(v)


class EstimateEntry(BaseModel):
    alignment: str
    transform_matrix: List[float] = Field(..., min_length=16, max_length=16)

    @field_validator("transform_matrix")
    @classmethod
    def validate_transform_matrix(cls, v):
        return _check_transform(v)

    @field_validator("alignment")
    @classmethod
    def validate_alignment(cls, v):
        return _check_alignment(v)


class NodeEntry(BaseModel):
    name: str
    bounds_min: List[float] = Field(..., min_length=3, max_length=3)
    bounds_max: List[float] = Field(..., min_length=3, max_length=3)
    parent: Optional[str] = None

    @model_validator(mode="after")
    def validate_bounds(self):
        if any(lo > hi for lo, hi in zip(self.bounds_min, self.bounds_max)):
            raise ValueError(f"Node {self.name}: bounds_min exceeds bounds_max")
        return self


class ObjectEntry(BaseModel):
    object_id: str
    transform_matrix: List[float] = Field(..., min_length=16, max_length=16)
    node: str

    @field_validator("transform_matrix")
    @classmethod
    def validate_transform_matrix(cls, v):
        return _check_transform(v)


class SceneSnapshot(BaseModel):
    """Pydantic model for scene snapshot validation."""

    scene_id: str
    camera: CameraEntry
    planes: List[PlaneEntry] = Field(default_factory=list)
    estimates: List[EstimateEntry] = Field(default_factory=list)
    nodes: List[NodeEntry] = Field(default_factory=list)
    objects: List[ObjectEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_references(self):
        names = [n.name for n in self.nodes]
        if len(set(names)) != len(names):
            raise ValueError("Node names must be unique")

        known = set(names)
        for node in self.nodes:
            if node.parent is not None and node.parent not in known:
                raise ValueError(f"Node {node.name} has unknown parent: {node.parent}")

        parents = {n.name: n.parent for n in self.nodes}
        for name in names:
            seen = set()
            current = name
            while current is not None:
                if current in seen:
                    raise ValueError(f"Node parent cycle at {current}")
                seen.add(current)
                current = parents[current]

        object_ids = [o.object_id for o in self.objects]
        if len(set(object_ids)) != len(object_ids):
            raise ValueError("Object ids must be unique")
        for obj in self.objects:
            if obj.node not in known:
                raise ValueError(f"Object {obj.object_id} references unknown node: {obj.node}")
        return self


def validate_snapshot_data(data: dict) -> Tuple[bool, Optional[SceneSnapshot], List[str]]:
    """Validate an already-parsed snapshot dictionary."""
    try:
        snapshot = SceneSnapshot(**data)
        return True, snapshot, []
    except Exception as e:
        return False, None, [str(e)]


def load_snapshot(snapshot_path: Path) -> Tuple[bool, Optional[SceneSnapshot], List[str]]:
    """
    Validate a scene snapshot JSON file.

    Args:
        snapshot_path: Path to snapshot JSON

    Returns:
        Tuple of (is_valid, parsed_snapshot, list_of_errors)
    """
    if not snapshot_path.exists():
        return False, None, ["Snapshot file does not exist"]

    try:
        with open(snapshot_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return False, None, [f"Invalid JSON: {e}"]

    if not isinstance(data, dict):
        return False, None, ["Snapshot must be a JSON object"]

    return validate_snapshot_data(data)
