"""
Snapshot Replay

Runs the placement routines against a recorded scene snapshot, for
checking tap behaviour without a device.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from utils.matrix import with_position

from .anchor_binder import rebind_anchor
from .config import DEFAULT_HEIGHT_TOLERANCE, PlacementConfig
from .object_picker import object_at
from .snapshot import Scene, SnapshotError, load_scene
from .surface_picker import resolve_hit
from .types import ALL_ALIGNMENTS, Alignment, ResolvedHit

console = Console()
app = typer.Typer(help="Replay surface picking and anchoring against a scene snapshot")


def _open_scene(snapshot: Path) -> Scene:
    try:
        return load_scene(snapshot)
    except SnapshotError as e:
        console.print(f"[bold red]Could not load snapshot:[/bold red] {e}")
        raise typer.Exit(1)


def _parse_alignments(values: Optional[List[str]]) -> frozenset:
    if not values:
        return ALL_ALIGNMENTS
    try:
        return frozenset(Alignment(v.lower()) for v in values)
    except ValueError as e:
        console.print(f"[bold red]Invalid alignment:[/bold red] {e}")
        raise typer.Exit(1)


def _print_hit(hit: Optional[ResolvedHit]) -> None:
    if hit is None:
        console.print("[yellow]No surface under point[/yellow]")
        return

    x, y, z = hit.position
    console.print(Panel.fit(
        f"[bold green]Surface hit[/bold green]\n\n"
        f"Source: {hit.source_kind.value}\n"
        f"Alignment: {hit.surface_alignment.value}\n"
        f"Distance: {hit.distance:.3f}m\n"
        f"Position: [{x:.3f}, {y:.3f}, {z:.3f}]\n"
        f"Plane anchor: {hit.owner_anchor_id or '-'}",
        border_style="green"
    ))


def _print_anchors(scene: Scene) -> None:
    table = Table(title="Session anchors")
    table.add_column("Anchor")
    table.add_column("Object")
    table.add_column("Position")

    owners = {o.bound_anchor_id: o.object_id for o in scene.objects.values()}
    for anchor_id, anchor in scene.session.anchors.items():
        x, y, z = anchor.transform[:3, 3]
        table.add_row(anchor_id, owners.get(anchor_id, "-"), f"[{x:.3f}, {y:.3f}, {z:.3f}]")

    console.print(table)


@app.command()
def resolve(
    snapshot: Path = typer.Argument(..., help="Path to scene snapshot JSON"),
    x: float = typer.Option(..., help="Screen X in pixels"),
    y: float = typer.Option(..., help="Screen Y in pixels"),
    infinite: bool = typer.Option(False, "--infinite", help="Extend existing planes beyond their boundary"),
    height: Optional[float] = typer.Option(None, help="Reference object height for horizontal infinite planes"),
    align: Optional[List[str]] = typer.Option(None, help="Allowed alignment (repeatable): horizontal, vertical"),
    tolerance: float = typer.Option(DEFAULT_HEIGHT_TOLERANCE, help="Height band for horizontal infinite planes"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report which tier produced the hit"),
):
    """Resolve a screen point to a surface hit."""
    scene = _open_scene(snapshot)
    config = PlacementConfig(height_tolerance=tolerance, verbose=verbose)

    hit = resolve_hit(
        scene.planes,
        (x, y),
        allow_infinite_plane_extension=infinite,
        reference_object_height=height,
        allowed_alignments=_parse_alignments(align),
        config=config,
    )
    _print_hit(hit)


@app.command()
def pick(
    snapshot: Path = typer.Argument(..., help="Path to scene snapshot JSON"),
    x: float = typer.Option(..., help="Screen X in pixels"),
    y: float = typer.Option(..., help="Screen Y in pixels"),
):
    """Show the tracked object under a screen point."""
    scene = _open_scene(snapshot)

    tracked = object_at(scene.graph, scene.registry, (x, y))
    if tracked is None:
        console.print("[yellow]No object under point[/yellow]")
        return

    px, py, pz = tracked.position
    console.print(f"[green]{tracked.object_id}[/green] at [{px:.3f}, {py:.3f}, {pz:.3f}]")


@app.command()
def place(
    snapshot: Path = typer.Argument(..., help="Path to scene snapshot JSON"),
    x: float = typer.Option(..., help="Screen X in pixels"),
    y: float = typer.Option(..., help="Screen Y in pixels"),
    object_id: str = typer.Option(..., "--object", help="Object to move"),
    infinite: bool = typer.Option(False, "--infinite", help="Extend existing planes beyond their boundary"),
    align: Optional[List[str]] = typer.Option(None, help="Allowed alignment (repeatable): horizontal, vertical"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Report tier and anchor decisions"),
):
    """Move an object to the surface under a point and rebind its anchor."""
    scene = _open_scene(snapshot)
    config = PlacementConfig(verbose=verbose)

    tracked = scene.objects.get(object_id)
    if tracked is None:
        console.print(f"[bold red]Unknown object:[/bold red] {object_id}")
        raise typer.Exit(1)

    # Anchor the object where it was recorded, then move it
    rebind_anchor(scene.session, tracked, config)

    hit = resolve_hit(
        scene.planes,
        (x, y),
        allow_infinite_plane_extension=infinite,
        reference_object_height=float(tracked.position[1]),
        allowed_alignments=_parse_alignments(align),
        config=config,
    )
    _print_hit(hit)
    if hit is None:
        return

    tracked.current_world_transform = with_position(tracked.current_world_transform, hit.position)
    rebind_anchor(scene.session, tracked, config)
    _print_anchors(scene)


if __name__ == "__main__":
    app()
