"""
In-process scene collaborators.

Stand-ins for the services a tracking framework provides to the
placement routines: camera rays, plane ray-casts, bounding-volume hit
tests, the node-to-object registry and the session anchor table.

Conventions follow ARKit: Y up, the camera looks along -Z, image rows
grow downward, and a plane anchor's surface lies in its local X-Z plane
with the local +Y axis as normal.
"""

import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

import numpy as np

from utils.matrix import (
    compose_transform,
    compute_camera_intrinsics_dict,
    extract_position,
    extract_rotation,
)

from .types import (
    Alignment,
    HitKind,
    RayCastCandidate,
    SceneAnchor,
    ScreenPoint,
    TrackedObject,
)

PARALLEL_EPSILON = 1e-6

Ray = Tuple[np.ndarray, np.ndarray]


@dataclass
class PinholeCamera:
    """Pinhole camera with a camera-to-world transform."""
    fx: float
    fy: float
    cx: float
    cy: float
    width: int
    height: int
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))

    @classmethod
    def from_intrinsics(
        cls,
        intrinsic_matrix: List[float],
        width: int,
        height: int,
        transform: Optional[np.ndarray] = None
    ) -> "PinholeCamera":
        """Build from a row-major 3x3 intrinsic matrix."""
        intrinsics = compute_camera_intrinsics_dict(intrinsic_matrix, width, height)
        return cls(
            fx=intrinsics["fl_x"],
            fy=intrinsics["fl_y"],
            cx=intrinsics["cx"],
            cy=intrinsics["cy"],
            width=intrinsics["w"],
            height=intrinsics["h"],
            transform=transform if transform is not None else np.eye(4),
        )

    def contains(self, point: ScreenPoint) -> bool:
        u, v = point
        return 0 <= u < self.width and 0 <= v < self.height

    def ray_through(self, point: ScreenPoint) -> Optional[Ray]:
        """
        World-space ray through a viewport point.

        Returns:
            (origin, unit direction), or None outside the viewport
        """
        if not self.contains(point):
            return None

        u, v = point
        direction_cam = np.array([
            (u - self.cx) / self.fx,
            -(v - self.cy) / self.fy,
            -1.0,
        ])
        direction = extract_rotation(self.transform) @ direction_cam
        return extract_position(self.transform), direction / np.linalg.norm(direction)


def intersect_plane(
    ray: Ray,
    plane_transform: np.ndarray
) -> Optional[Tuple[float, np.ndarray]]:
    """
    Intersect a ray with the unbounded plane of an anchor transform.

    Returns:
        (distance along the ray, hit point), or None when the ray is
        parallel to the plane or the plane is behind the origin
    """
    origin, direction = ray
    normal = plane_transform[:3, 1]
    denom = float(np.dot(normal, direction))
    if abs(denom) < PARALLEL_EPSILON:
        return None

    distance = float(np.dot(normal, extract_position(plane_transform) - origin)) / denom
    if distance <= 0:
        return None

    return distance, origin + distance * direction


@dataclass
class TrackedPlane:
    """A plane anchor the session has observed, with its measured extent."""
    anchor_id: str
    transform: np.ndarray
    extent: Tuple[float, float]  # (x, z) in anchor space
    alignment: Alignment

    def contains(self, world_point: np.ndarray) -> bool:
        """Whether a point on the plane falls inside the observed extent."""
        local = extract_rotation(self.transform).T @ (world_point - extract_position(self.transform))
        half_x, half_z = self.extent[0] / 2, self.extent[1] / 2
        return abs(local[0]) <= half_x and abs(local[2]) <= half_z


@dataclass
class EstimatedSurface:
    """An unanchored, unbounded surface estimate."""
    alignment: Alignment
    transform: np.ndarray

    @property
    def kind(self) -> HitKind:
        if self.alignment == Alignment.HORIZONTAL:
            return HitKind.ESTIMATED_HORIZONTAL_PLANE
        return HitKind.ESTIMATED_VERTICAL_PLANE


class PlaneScene:
    """Ray-casts a camera's viewport against tracked planes and estimates."""

    def __init__(
        self,
        camera: PinholeCamera,
        planes: Iterable[TrackedPlane] = (),
        estimates: Iterable[EstimatedSurface] = ()
    ):
        self.camera = camera
        self.planes = list(planes)
        self.estimates = list(estimates)

    def ray_cast(self, point: ScreenPoint, kinds: Set[HitKind]) -> List[RayCastCandidate]:
        ray = self.camera.ray_through(point)
        if ray is None:
            return []

        candidates = []
        for plane in self.planes:
            hit = intersect_plane(ray, plane.transform)
            if hit is None:
                continue
            distance, point_world = hit
            hit_transform = compose_transform(extract_rotation(plane.transform), point_world)

            if HitKind.EXISTING_PLANE_GEOMETRY in kinds and plane.contains(point_world):
                candidates.append(RayCastCandidate(
                    kind=HitKind.EXISTING_PLANE_GEOMETRY,
                    world_transform=hit_transform,
                    distance=distance,
                    surface_alignment=plane.alignment,
                    owner_anchor_id=plane.anchor_id,
                ))
            if HitKind.EXISTING_PLANE_INFINITE in kinds:
                candidates.append(RayCastCandidate(
                    kind=HitKind.EXISTING_PLANE_INFINITE,
                    world_transform=hit_transform,
                    distance=distance,
                    surface_alignment=plane.alignment,
                    owner_anchor_id=plane.anchor_id,
                ))

        for estimate in self.estimates:
            if estimate.kind not in kinds:
                continue
            hit = intersect_plane(ray, estimate.transform)
            if hit is None:
                continue
            distance, point_world = hit
            candidates.append(RayCastCandidate(
                kind=estimate.kind,
                world_transform=compose_transform(extract_rotation(estimate.transform), point_world),
                distance=distance,
                surface_alignment=estimate.alignment,
            ))

        candidates.sort(key=lambda c: c.distance)
        return candidates


@dataclass(eq=False)
class SceneNode:
    """A renderable node with a world-space axis-aligned bounding box."""
    name: str
    bounds_min: np.ndarray
    bounds_max: np.ndarray
    parent: Optional["SceneNode"] = None

    def intersect(self, ray: Ray) -> Optional[float]:
        """Slab test; distance to the box entry point (0 if the origin is inside)."""
        origin, direction = ray
        t_near, t_far = -np.inf, np.inf

        for axis in range(3):
            if abs(direction[axis]) < PARALLEL_EPSILON:
                if not self.bounds_min[axis] <= origin[axis] <= self.bounds_max[axis]:
                    return None
                continue
            t1 = (self.bounds_min[axis] - origin[axis]) / direction[axis]
            t2 = (self.bounds_max[axis] - origin[axis]) / direction[axis]
            t_near = max(t_near, min(t1, t2))
            t_far = min(t_far, max(t1, t2))

        if t_near > t_far or t_far < 0:
            return None
        return float(max(t_near, 0.0))


class SceneGraph:
    """Bounding-volume hit testing over a flat list of scene nodes."""

    def __init__(self, camera: PinholeCamera, nodes: Iterable[SceneNode] = ()):
        self.camera = camera
        self.nodes = list(nodes)

    def hit_test_bounding_volumes(self, point: ScreenPoint) -> List[SceneNode]:
        ray = self.camera.ray_through(point)
        if ray is None:
            return []

        hits = []
        for node in self.nodes:
            distance = node.intersect(ray)
            if distance is not None:
                hits.append((distance, node))

        hits.sort(key=lambda item: item[0])
        return [node for _, node in hits]


class ObjectRegistry:
    """Maps scene nodes to the tracked objects that own them."""

    def __init__(self):
        self._objects: Dict[SceneNode, TrackedObject] = {}

    def register(self, root: SceneNode, tracked_object: TrackedObject) -> None:
        self._objects[root] = tracked_object

    def object_for_node(self, node: Optional[SceneNode]) -> Optional[TrackedObject]:
        """Walk up from `node` to the first ancestor registered to an object."""
        visited = set()
        while node is not None and node not in visited:
            visited.add(node)
            tracked = self._objects.get(node)
            if tracked is not None:
                return tracked
            node = node.parent
        return None


class AnchorTable:
    """The session's anchor set."""

    def __init__(self):
        self._anchors: Dict[str, SceneAnchor] = {}

    @property
    def anchors(self) -> Mapping[str, SceneAnchor]:
        return MappingProxyType(self._anchors)

    def add_anchor(self, transform: np.ndarray) -> str:
        anchor = SceneAnchor(anchor_id=uuid.uuid4().hex, transform=transform)
        self._anchors[anchor.anchor_id] = anchor
        return anchor.anchor_id

    def remove_anchor(self, anchor_id: str) -> None:
        """Drop an anchor; unknown ids are ignored."""
        self._anchors.pop(anchor_id, None)

    def __len__(self) -> int:
        return len(self._anchors)

    def __contains__(self, anchor_id: str) -> bool:
        return anchor_id in self._anchors
