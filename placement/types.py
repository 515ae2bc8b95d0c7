"""
Placement types and collaborator protocols.

Candidates and hits are plain values; the perception subsystem, the
scene graph and the tracking session are reached only through the
protocols below.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, Sequence, Set, Tuple

import numpy as np

from utils.matrix import extract_position

ScreenPoint = Tuple[float, float]


class HitKind(Enum):
    """Kind of surface a ray-cast candidate was produced from."""
    EXISTING_PLANE_GEOMETRY = "existing_plane_geometry"
    EXISTING_PLANE_INFINITE = "existing_plane_infinite"
    ESTIMATED_HORIZONTAL_PLANE = "estimated_horizontal_plane"
    ESTIMATED_VERTICAL_PLANE = "estimated_vertical_plane"


class Alignment(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


ALL_ALIGNMENTS = frozenset({Alignment.HORIZONTAL, Alignment.VERTICAL})


@dataclass(frozen=True)
class RayCastCandidate:
    """A single ray-cast result reported by the perception subsystem."""
    kind: HitKind
    world_transform: np.ndarray
    distance: float
    surface_alignment: Alignment
    owner_anchor_id: Optional[str] = None

    @property
    def position(self) -> np.ndarray:
        return extract_position(self.world_transform)


@dataclass(frozen=True)
class ResolvedHit:
    """The single surface location a screen point was resolved to."""
    world_transform: np.ndarray
    surface_alignment: Alignment
    source_kind: HitKind
    distance: float
    owner_anchor_id: Optional[str] = None

    @classmethod
    def from_candidate(cls, candidate: RayCastCandidate) -> "ResolvedHit":
        return cls(
            world_transform=candidate.world_transform,
            surface_alignment=candidate.surface_alignment,
            source_kind=candidate.kind,
            distance=candidate.distance,
            owner_anchor_id=candidate.owner_anchor_id,
        )

    @property
    def position(self) -> np.ndarray:
        return extract_position(self.world_transform)


@dataclass(eq=False)
class TrackedObject:
    """
    A movable object placed in the scene.

    `bound_anchor_id` is a lookup key into the tracking session's anchor
    table; the session owns the anchor itself.
    """
    object_id: str
    current_world_transform: np.ndarray
    bound_anchor_id: Optional[str] = None

    @property
    def position(self) -> np.ndarray:
        return extract_position(self.current_world_transform)


@dataclass(frozen=True)
class SceneAnchor:
    anchor_id: str
    transform: np.ndarray


class RayCaster(Protocol):
    def ray_cast(self, point: ScreenPoint, kinds: Set[HitKind]) -> Sequence[RayCastCandidate]:
        """Candidates of the requested kinds, roughly near-to-far."""
        ...


class BoundingVolumeHitTester(Protocol):
    def hit_test_bounding_volumes(self, point: ScreenPoint) -> Sequence[Any]:
        """Nodes whose bounding volume the point's ray enters, nearest-first."""
        ...


class NodeRegistry(Protocol):
    def object_for_node(self, node: Any) -> Optional[TrackedObject]:
        ...


class TrackingSession(Protocol):
    def add_anchor(self, transform: np.ndarray) -> str:
        ...

    def remove_anchor(self, anchor_id: str) -> None:
        ...
