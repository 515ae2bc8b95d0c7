"""Tests for the in-process ray-casting and picking collaborators."""

import math

import numpy as np
import pytest

from placement.object_picker import object_at
from placement.scene import (
    EstimatedSurface,
    ObjectRegistry,
    PinholeCamera,
    PlaneScene,
    SceneGraph,
    SceneNode,
    TrackedPlane,
    intersect_plane,
)
from placement.surface_picker import resolve_hit
from placement.types import Alignment, HitKind, TrackedObject
from utils.matrix import compose_transform, rotation_about_x

ALL_KINDS = set(HitKind)


@pytest.fixture
def camera():
    """200x200 camera at the origin looking down -Z."""
    return PinholeCamera.from_intrinsics(
        [100.0, 0, 100.0, 0, 100.0, 100.0, 0, 0, 1],
        200,
        200,
    )


def floor_plane(center_z=-2.0, extent=(2.0, 2.0)):
    return TrackedPlane(
        anchor_id="floor",
        transform=compose_transform(position=np.array([0.0, -1.0, center_z])),
        extent=extent,
        alignment=Alignment.HORIZONTAL,
    )


def wall_plane(z=-5.0):
    return TrackedPlane(
        anchor_id="wall",
        transform=compose_transform(rotation_about_x(math.pi / 2), np.array([0.0, 0.0, z])),
        extent=(4.0, 4.0),
        alignment=Alignment.VERTICAL,
    )


class TestPinholeCamera:
    """Tests for viewport rays."""

    def test_center_ray_looks_forward(self, camera):
        """The principal point maps to the -Z axis."""
        origin, direction = camera.ray_through((100, 100))

        np.testing.assert_array_almost_equal(origin, [0, 0, 0])
        np.testing.assert_array_almost_equal(direction, [0, 0, -1])

    def test_lower_half_points_down(self, camera):
        """Image rows grow downward, world Y grows upward."""
        _, direction = camera.ray_through((100, 150))

        assert direction[1] < 0
        assert np.isclose(np.linalg.norm(direction), 1.0)

    def test_outside_viewport(self, camera):
        """Points outside the image produce no ray."""
        assert camera.ray_through((-1, 50)) is None
        assert camera.ray_through((50, 200)) is None

    def test_camera_transform_applied(self):
        """The ray starts at the camera position and follows its rotation."""
        camera = PinholeCamera.from_intrinsics(
            [100.0, 0, 100.0, 0, 100.0, 100.0, 0, 0, 1],
            200,
            200,
            transform=compose_transform(rotation_about_x(-math.pi / 2), np.array([0.0, 2.0, 0.0])),
        )

        origin, direction = camera.ray_through((100, 100))

        np.testing.assert_array_almost_equal(origin, [0, 2, 0])
        np.testing.assert_array_almost_equal(direction, [0, -1, 0])


class TestPlaneIntersection:
    """Tests for ray/plane intersection."""

    def test_parallel_ray_misses(self, camera):
        """A ray along the floor never meets it."""
        assert intersect_plane(camera.ray_through((100, 100)), floor_plane().transform) is None

    def test_plane_behind_camera_misses(self, camera):
        """Planes behind the ray origin are dropped."""
        assert intersect_plane(camera.ray_through((100, 100)), wall_plane(z=5.0).transform) is None

    def test_wall_hit_distance(self, camera):
        """Looking straight at a wall 5m away."""
        distance, point = intersect_plane(camera.ray_through((100, 100)), wall_plane().transform)

        assert distance == pytest.approx(5.0)
        np.testing.assert_array_almost_equal(point, [0, 0, -5])


class TestPlaneScene:
    """Tests for candidate generation."""

    def test_inside_extent_yields_geometry_and_infinite(self, camera):
        """A hit inside the observed extent is reported as both kinds."""
        scene = PlaneScene(camera, [floor_plane()])

        candidates = scene.ray_cast((100, 150), ALL_KINDS)

        assert {c.kind for c in candidates} == {
            HitKind.EXISTING_PLANE_GEOMETRY,
            HitKind.EXISTING_PLANE_INFINITE,
        }
        hit = candidates[0]
        np.testing.assert_array_almost_equal(hit.position, [0, -1, -2])
        assert hit.distance == pytest.approx(2 * math.sqrt(1.25))
        assert hit.owner_anchor_id == "floor"

    def test_outside_extent_yields_infinite_only(self, camera):
        """Beyond the observed extent only the infinite-plane hit remains."""
        scene = PlaneScene(camera, [floor_plane(center_z=0.0)])

        candidates = scene.ray_cast((100, 150), ALL_KINDS)

        assert [c.kind for c in candidates] == [HitKind.EXISTING_PLANE_INFINITE]

    def test_kind_filter(self, camera):
        """Only requested kinds are returned."""
        scene = PlaneScene(
            camera,
            [floor_plane()],
            [EstimatedSurface(Alignment.VERTICAL, wall_plane().transform)],
        )

        candidates = scene.ray_cast((100, 150), {HitKind.ESTIMATED_VERTICAL_PLANE})

        assert [c.kind for c in candidates] == [HitKind.ESTIMATED_VERTICAL_PLANE]
        assert candidates[0].owner_anchor_id is None

    def test_sorted_near_to_far(self, camera):
        """Candidates come back nearest first."""
        scene = PlaneScene(camera, [wall_plane(), floor_plane()])

        candidates = scene.ray_cast((100, 150), {HitKind.EXISTING_PLANE_INFINITE})

        assert [c.owner_anchor_id for c in candidates] == ["floor", "wall"]
        assert candidates[0].distance < candidates[1].distance

    def test_outside_viewport_yields_nothing(self, camera):
        """Out-of-viewport taps have no candidates."""
        scene = PlaneScene(camera, [floor_plane()])

        assert scene.ray_cast((500, 500), ALL_KINDS) == []

    def test_resolve_hit_on_scene(self, camera):
        """End to end: a floor tap resolves to the observed floor geometry."""
        scene = PlaneScene(
            camera,
            [floor_plane(), wall_plane()],
            [EstimatedSurface(Alignment.HORIZONTAL, compose_transform(position=np.array([0.0, -0.5, 0.0])))],
        )

        hit = resolve_hit(scene, (100, 150))

        assert hit.source_kind == HitKind.EXISTING_PLANE_GEOMETRY
        assert hit.owner_anchor_id == "floor"


def make_box(name, z, parent=None):
    return SceneNode(
        name=name,
        bounds_min=np.array([-0.5, -0.5, z - 0.5]),
        bounds_max=np.array([0.5, 0.5, z + 0.5]),
        parent=parent,
    )


class TestSceneGraph:
    """Tests for bounding-volume hit testing."""

    def test_nearest_first(self, camera):
        """Nodes along the ray come back nearest first."""
        far = make_box("far", -6.0)
        near = make_box("near", -3.0)
        graph = SceneGraph(camera, [far, near])

        assert [n.name for n in graph.hit_test_bounding_volumes((100, 100))] == ["near", "far"]

    def test_miss(self, camera):
        """A ray passing beside a box misses it."""
        graph = SceneGraph(camera, [make_box("box", -3.0)])

        assert graph.hit_test_bounding_volumes((0, 0)) == []

    def test_box_behind_camera(self, camera):
        """Boxes behind the camera are not hit."""
        graph = SceneGraph(camera, [make_box("box", 3.0)])

        assert graph.hit_test_bounding_volumes((100, 100)) == []

    def test_origin_inside_box(self, camera):
        """A camera inside a bounding box hits it at distance zero."""
        box = make_box("room", 0.0)

        assert box.intersect(camera.ray_through((100, 100))) == 0.0


class TestObjectAt:
    """Tests for point-to-object lookup."""

    def test_child_node_maps_to_owner(self, camera):
        """Hitting a child node resolves to the object owning its root."""
        root = make_box("vase", -10.0)
        child = make_box("vase-handle", -3.0, parent=root)
        vase = TrackedObject(object_id="vase", current_world_transform=np.eye(4))
        registry = ObjectRegistry()
        registry.register(root, vase)

        graph = SceneGraph(camera, [root, child])

        assert object_at(graph, registry, (100, 100)) is vase

    def test_unowned_nodes_skipped(self, camera):
        """Nearer scenery nodes that belong to no object are skipped."""
        scenery = make_box("lamp", -2.0)
        root = make_box("picture", -4.0)
        picture = TrackedObject(object_id="picture", current_world_transform=np.eye(4))
        registry = ObjectRegistry()
        registry.register(root, picture)

        graph = SceneGraph(camera, [scenery, root])

        assert object_at(graph, registry, (100, 100)) is picture

    def test_nothing_hit(self, camera):
        """No bounding volume under the point gives None."""
        registry = ObjectRegistry()
        graph = SceneGraph(camera, [make_box("box", -3.0)])

        assert object_at(graph, registry, (0, 0)) is None

    def test_cyclic_parents_terminate(self, camera):
        """A parent loop with no registered owner resolves to None."""
        first = make_box("a", -3.0)
        second = make_box("b", -4.0, parent=first)
        first.parent = second
        registry = ObjectRegistry()

        assert object_at(SceneGraph(camera, [first, second]), registry, (100, 100)) is None
