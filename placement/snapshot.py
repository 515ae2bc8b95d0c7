"""
Scene snapshot loading.

Builds the in-process collaborators (camera, plane ray-caster, scene
graph, object registry, anchor table) from a validated snapshot file.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import numpy as np
from rich.console import Console

from utils.matrix import row_major_to_matrix
from utils.validation import SceneSnapshot, load_snapshot

from .scene import (
    AnchorTable,
    EstimatedSurface,
    ObjectRegistry,
    PinholeCamera,
    PlaneScene,
    SceneGraph,
    SceneNode,
    TrackedPlane,
)
from .types import Alignment, TrackedObject

console = Console()


class SnapshotError(Exception):
    """Error while loading a scene snapshot."""
    pass


@dataclass
class Scene:
    """Collaborators rebuilt from a snapshot."""
    scene_id: str
    camera: PinholeCamera
    planes: PlaneScene
    graph: SceneGraph
    registry: ObjectRegistry
    session: AnchorTable
    objects: Dict[str, TrackedObject] = field(default_factory=dict)


def build_scene(snapshot: SceneSnapshot) -> Scene:
    """Create scene collaborators from a validated snapshot."""
    cam = snapshot.camera
    camera = PinholeCamera.from_intrinsics(
        cam.intrinsic_matrix,
        cam.image_width,
        cam.image_height,
        transform=row_major_to_matrix(cam.transform_matrix),
    )

    planes = [
        TrackedPlane(
            anchor_id=p.anchor_id,
            transform=row_major_to_matrix(p.transform_matrix),
            extent=(p.extent[0], p.extent[1]),
            alignment=Alignment(p.alignment),
        )
        for p in snapshot.planes
    ]
    estimates = [
        EstimatedSurface(
            alignment=Alignment(e.alignment),
            transform=row_major_to_matrix(e.transform_matrix),
        )
        for e in snapshot.estimates
    ]

    nodes: Dict[str, SceneNode] = {}
    for entry in snapshot.nodes:
        nodes[entry.name] = SceneNode(
            name=entry.name,
            bounds_min=np.array(entry.bounds_min, dtype=float),
            bounds_max=np.array(entry.bounds_max, dtype=float),
        )
    for entry in snapshot.nodes:
        if entry.parent is not None:
            nodes[entry.name].parent = nodes[entry.parent]

    registry = ObjectRegistry()
    objects: Dict[str, TrackedObject] = {}
    for entry in snapshot.objects:
        tracked = TrackedObject(
            object_id=entry.object_id,
            current_world_transform=row_major_to_matrix(entry.transform_matrix),
        )
        registry.register(nodes[entry.node], tracked)
        objects[entry.object_id] = tracked

    console.print(
        f"[blue]Loaded scene {snapshot.scene_id}: {len(planes)} planes, "
        f"{len(estimates)} estimates, {len(nodes)} nodes, {len(objects)} objects[/blue]"
    )

    return Scene(
        scene_id=snapshot.scene_id,
        camera=camera,
        planes=PlaneScene(camera, planes, estimates),
        graph=SceneGraph(camera, nodes.values()),
        registry=registry,
        session=AnchorTable(),
        objects=objects,
    )


def load_scene(snapshot_path: Path) -> Scene:
    """
    Load and validate a snapshot file.

    Raises:
        SnapshotError: if the file is missing or fails validation
    """
    is_valid, snapshot, errors = load_snapshot(snapshot_path)
    if not is_valid:
        raise SnapshotError(f"Invalid snapshot {snapshot_path}: {'; '.join(errors)}")
    return build_scene(snapshot)
