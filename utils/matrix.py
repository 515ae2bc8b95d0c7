"""Matrix utilities for ARKit-convention world transforms."""

import numpy as np
from typing import List, Optional


def row_major_to_matrix(data: List[float]) -> np.ndarray:
    """Convert row-major 16-element list to 4x4 matrix."""
    if len(data) != 16:
        raise ValueError(f"Expected 16 elements, got {len(data)}")
    return np.array(data, dtype=float).reshape(4, 4)


def matrix_to_row_major(matrix: np.ndarray) -> List[float]:
    """Convert 4x4 matrix to row-major 16-element list."""
    return matrix.flatten().tolist()


def validate_transform(matrix: np.ndarray) -> bool:
    """
    Validate that a 4x4 matrix is a rigid transformation matrix.

    Checks:
    - Shape is (4, 4)
    - No NaN or Inf values
    - Bottom row is [0, 0, 0, 1]
    - Rotation part is orthonormal (within tolerance)
    """
    if matrix.shape != (4, 4):
        return False

    if np.any(np.isnan(matrix)) or np.any(np.isinf(matrix)):
        return False

    if not np.allclose(matrix[3, :], [0, 0, 0, 1], atol=1e-6):
        return False

    rotation = matrix[:3, :3]
    should_be_identity = rotation @ rotation.T
    if not np.allclose(should_be_identity, np.eye(3), atol=1e-4):
        return False

    # Determinant of -1 would indicate reflection
    det = np.linalg.det(rotation)
    if not np.isclose(det, 1.0, atol=1e-4):
        return False

    return True


def extract_position(matrix: np.ndarray) -> np.ndarray:
    """Extract translation/position from 4x4 transform matrix."""
    return matrix[:3, 3].copy()


def extract_rotation(matrix: np.ndarray) -> np.ndarray:
    """Extract 3x3 rotation matrix from 4x4 transform matrix."""
    return matrix[:3, :3].copy()


def compose_transform(
    rotation: Optional[np.ndarray] = None,
    position: Optional[np.ndarray] = None
) -> np.ndarray:
    """Build a 4x4 transform from a 3x3 rotation and a translation."""
    result = np.eye(4)
    if rotation is not None:
        result[:3, :3] = rotation
    if position is not None:
        result[:3, 3] = position
    return result


def with_position(matrix: np.ndarray, position: np.ndarray) -> np.ndarray:
    """Return a copy of `matrix` moved to `position`, rotation unchanged."""
    result = matrix.copy()
    result[:3, 3] = position
    return result


def compute_camera_intrinsics_dict(
    intrinsic_matrix: List[float],
    width: int,
    height: int
) -> dict:
    """
    Unpack an ARKit intrinsic matrix.

    ARKit provides a 3x3 intrinsic matrix:
    [fx,  0, cx]
    [ 0, fy, cy]
    [ 0,  0,  1]
    """
    # Intrinsic matrix is stored row-major as 9 elements
    if len(intrinsic_matrix) != 9:
        raise ValueError(f"Expected 9 elements in intrinsic matrix, got {len(intrinsic_matrix)}")

    K = np.array(intrinsic_matrix, dtype=float).reshape(3, 3)

    return {
        "fl_x": float(K[0, 0]),
        "fl_y": float(K[1, 1]),
        "cx": float(K[0, 2]),
        "cy": float(K[1, 2]),
        "w": width,
        "h": height,
    }


def rotation_about_x(angle_rad: float) -> np.ndarray:
    """3x3 rotation about the world X axis."""
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    return np.array([
        [1, 0, 0],
        [0, c, -s],
        [0, s, c],
    ])


def rotation_about_y(angle_rad: float) -> np.ndarray:
    """3x3 rotation about the world Y axis."""
    c, s = np.cos(angle_rad), np.sin(angle_rad)
    return np.array([
        [c, 0, s],
        [0, 1, 0],
        [-s, 0, c],
    ])
