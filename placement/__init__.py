"""
AR Placement Core

Resolves screen taps to surfaces in a tracked scene and keeps one
session anchor bound to each placed object.

Components:
1. Surface Picker - Screen point → best plane hit (geometry, infinite, estimated)
2. Object Picker - Screen point → tracked object via bounding volumes
3. Anchor Binder - Remove-then-add anchor replacement per object
"""

from .anchor_binder import rebind_anchor
from .config import PlacementConfig
from .object_picker import object_at
from .surface_picker import resolve_hit
from .types import (
    ALL_ALIGNMENTS,
    Alignment,
    HitKind,
    RayCastCandidate,
    ResolvedHit,
    SceneAnchor,
    TrackedObject,
)

__version__ = "0.1.0"

__all__ = [
    "rebind_anchor",
    "object_at",
    "resolve_hit",
    "PlacementConfig",
    "ALL_ALIGNMENTS",
    "Alignment",
    "HitKind",
    "RayCastCandidate",
    "ResolvedHit",
    "SceneAnchor",
    "TrackedObject",
]
