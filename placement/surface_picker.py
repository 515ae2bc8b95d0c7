"""
Surface Picker

Resolves a screen point to a single surface hit using a three-tier
fallback: observed plane geometry, then existing planes extended to
infinity, then estimated planes.
"""

from typing import Iterable, Optional, Sequence

from rich.console import Console

from .config import DEFAULT_HEIGHT_TOLERANCE, PlacementConfig
from .types import (
    ALL_ALIGNMENTS,
    Alignment,
    HitKind,
    RayCastCandidate,
    RayCaster,
    ResolvedHit,
    ScreenPoint,
)

console = Console()

EXACT_TIER_KINDS = frozenset({
    HitKind.EXISTING_PLANE_GEOMETRY,
    HitKind.ESTIMATED_VERTICAL_PLANE,
    HitKind.ESTIMATED_HORIZONTAL_PLANE,
})
INFINITE_TIER_KINDS = frozenset({HitKind.EXISTING_PLANE_INFINITE})


def _first_of_kind(
    candidates: Sequence[RayCastCandidate],
    kind: HitKind
) -> Optional[RayCastCandidate]:
    return next((c for c in candidates if c.kind == kind), None)


def _within_height_band(
    candidate: RayCastCandidate,
    reference_height: float,
    tolerance: float
) -> bool:
    plane_y = candidate.position[1]
    return plane_y - tolerance < reference_height < plane_y + tolerance


def pick_exact_geometry(
    candidates: Sequence[RayCastCandidate],
    allowed_alignments: Iterable[Alignment]
) -> Optional[RayCastCandidate]:
    """First hit on observed plane geometry with an allowed alignment."""
    allowed = set(allowed_alignments)
    return next(
        (
            c for c in candidates
            if c.kind == HitKind.EXISTING_PLANE_GEOMETRY and c.surface_alignment in allowed
        ),
        None,
    )


def pick_infinite_plane(
    candidates: Sequence[RayCastCandidate],
    allowed_alignments: Iterable[Alignment],
    reference_object_height: Optional[float] = None,
    height_tolerance: float = DEFAULT_HEIGHT_TOLERANCE
) -> Optional[RayCastCandidate]:
    """
    Scan infinite existing-plane hits in the order they were reported.

    The first allowed vertical hit wins outright. Horizontal hits are only
    accepted near the reference height (when one is given) so an object
    is not snapped onto an unrelated floor or table far below it; a
    rejected horizontal hit does not end the scan.
    """
    allowed = set(allowed_alignments)
    for candidate in candidates:
        if candidate.surface_alignment not in allowed:
            continue

        if candidate.surface_alignment == Alignment.VERTICAL:
            return candidate

        if reference_object_height is None:
            return candidate
        if _within_height_band(candidate, reference_object_height, height_tolerance):
            return candidate

    return None


def pick_estimated_plane(
    candidates: Sequence[RayCastCandidate],
    allowed_alignments: Iterable[Alignment]
) -> Optional[RayCastCandidate]:
    """
    Fall back to estimated planes.

    Vertical-only requests may land on a horizontal estimate: anything
    that hangs on a wall can also stand on a surface. With both
    alignments allowed the nearer estimate wins, ties going to the
    horizontal one.
    """
    allowed = set(allowed_alignments)
    h_result = _first_of_kind(candidates, HitKind.ESTIMATED_HORIZONTAL_PLANE)
    v_result = _first_of_kind(candidates, HitKind.ESTIMATED_VERTICAL_PLANE)

    horizontal = Alignment.HORIZONTAL in allowed
    vertical = Alignment.VERTICAL in allowed

    if horizontal and not vertical:
        return h_result
    if vertical and not horizontal:
        return v_result if v_result is not None else h_result
    if horizontal and vertical:
        if h_result is not None and v_result is not None:
            return h_result if h_result.distance <= v_result.distance else v_result
        return h_result if h_result is not None else v_result
    return None


def resolve_hit(
    ray_caster: RayCaster,
    screen_point: ScreenPoint,
    allow_infinite_plane_extension: bool = False,
    reference_object_height: Optional[float] = None,
    allowed_alignments: Iterable[Alignment] = ALL_ALIGNMENTS,
    config: Optional[PlacementConfig] = None
) -> Optional[ResolvedHit]:
    """
    Resolve a screen point to the surface location it refers to.

    Args:
        ray_caster: Perception collaborator answering ray-cast queries
        screen_point: Point in viewport coordinates
        allow_infinite_plane_extension: Consider existing planes beyond their
            observed boundary
        reference_object_height: World-Y of the object being moved, used to
            filter horizontal infinite-plane hits
        allowed_alignments: Surface alignments the result may have
        config: Placement configuration

    Returns:
        The resolved hit, or None when no candidate qualifies
    """
    config = config or PlacementConfig()
    allowed = frozenset(allowed_alignments)
    if not allowed:
        return None

    results = list(ray_caster.ray_cast(screen_point, set(EXACT_TIER_KINDS)))

    hit = pick_exact_geometry(results, allowed)
    if hit is not None:
        return _resolved(hit, "plane geometry", config)

    if allow_infinite_plane_extension:
        infinite_results = list(ray_caster.ray_cast(screen_point, set(INFINITE_TIER_KINDS)))
        hit = pick_infinite_plane(
            infinite_results,
            allowed,
            reference_object_height=reference_object_height,
            height_tolerance=config.height_tolerance,
        )
        if hit is not None:
            return _resolved(hit, "infinite plane", config)

    hit = pick_estimated_plane(results, allowed)
    if hit is not None:
        return _resolved(hit, "estimated plane", config)

    if config.verbose:
        console.print(f"[dim]No surface at {screen_point}[/dim]")
    return None


def _resolved(candidate: RayCastCandidate, tier: str, config: PlacementConfig) -> ResolvedHit:
    if config.verbose:
        console.print(
            f"[dim]Resolved {tier} hit ({candidate.surface_alignment.value}) "
            f"at {candidate.distance:.3f}m[/dim]"
        )
    return ResolvedHit.from_candidate(candidate)
