"""Configuration for surface picking and anchor binding."""

from dataclasses import dataclass

# Half-height of the band a horizontal infinite-plane hit must fall in
# around the reference object height (scene units, metres in ARKit).
DEFAULT_HEIGHT_TOLERANCE = 0.05


@dataclass
class PlacementConfig:
    """Configuration for the placement routines."""
    height_tolerance: float = DEFAULT_HEIGHT_TOLERANCE
    verbose: bool = False  # Report tier/anchor decisions on the console
