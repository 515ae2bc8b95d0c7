"""
Anchor Binder

Keeps exactly one session anchor bound to each tracked object.
"""

from typing import Optional

from rich.console import Console

from .config import PlacementConfig
from .types import TrackedObject, TrackingSession

console = Console()


def rebind_anchor(
    session: TrackingSession,
    tracked_object: TrackedObject,
    config: Optional[PlacementConfig] = None
) -> None:
    """
    Replace the object's anchor with one at its current world transform.

    The old anchor is removed from the session before the new one is
    added, so the session never holds two anchors for one object. The
    remove/add pair is not atomic; callers on more than one thread must
    serialize calls for the same object.
    """
    config = config or PlacementConfig()

    previous_id = tracked_object.bound_anchor_id
    if previous_id is not None:
        session.remove_anchor(previous_id)

    new_id = session.add_anchor(tracked_object.current_world_transform.copy())
    tracked_object.bound_anchor_id = new_id

    if config.verbose:
        replaced = f" (replaced {previous_id})" if previous_id is not None else ""
        console.print(f"[dim]Anchored {tracked_object.object_id} to {new_id}{replaced}[/dim]")
