"""Point-to-object lookup against bounding volumes."""

from typing import Optional

from .types import BoundingVolumeHitTester, NodeRegistry, ScreenPoint, TrackedObject


def object_at(
    hit_tester: BoundingVolumeHitTester,
    registry: NodeRegistry,
    screen_point: ScreenPoint
) -> Optional[TrackedObject]:
    """
    Return the nearest tracked object whose bounding volume the point hits.

    Only bounding volumes are tested, not mesh geometry. Hit nodes that
    belong to no tracked object are skipped.
    """
    for node in hit_tester.hit_test_bounding_volumes(screen_point):
        tracked = registry.object_for_node(node)
        if tracked is not None:
            return tracked
    return None
