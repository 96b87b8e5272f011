import logging
import numpy as np
from .errors import InvalidParameterError

logger = logging.getLogger(__name__)

SINGULAR_JACOBIAN_EPS = 1e-12


def gridJacobian(points: np.ndarray) -> np.ndarray:
    """
    Jacobian of the mapping from normalized lattice coordinates (s, t) in [0,1]^2
    to physical positions.

    Parameters:
    - points: np.ndarray of shape (Ydim, Xdim, 2).

    Returns:
    - jacobian: np.ndarray of shape (Ydim, Xdim, 2, 2), column 0 is dP/ds and column 1 is dP/dt.
    """
    Ydim, Xdim = points.shape[:2]
    # np.gradient uses central differences inside and one-sided ones at the borders
    dPdi = np.gradient(points, axis=1)
    dPdj = np.gradient(points, axis=0)
    jacobian = np.empty((Ydim, Xdim, 2, 2), dtype=np.float64)
    jacobian[..., :, 0] = dPdi * (Xdim - 1)
    jacobian[..., :, 1] = dPdj * (Ydim - 1)
    return jacobian


def sampleVectorField(grid) -> np.ndarray:
    """Express the grid's point vectors in normalized parametric space.

    The returned (Ydim, Xdim, 2) float32 array is ready to upload as an RG
    texture: texel (i, j) holds (ds/dtau, dt/dtau) at node (i, j). Because
    streamlines are traced in this space, StepSize is measured in normalized
    lattice units rather than physical distance; strongly varying cell sizes
    therefore change the apparent speed along a path.
    """
    if grid.vectors is None:
        raise InvalidParameterError("Input grid has no point vectors")
    if grid.isDegenerate():
        raise InvalidParameterError(f"Input grid must be at least 2x2, got {grid.Xdim}x{grid.Ydim}")
    vectors = grid.vectors.astype(np.float64)
    if not np.all(np.isfinite(vectors)):
        raise InvalidParameterError("Input vectors contain non-finite values")

    jacobian = gridJacobian(grid.points)
    det = jacobian[..., 0, 0] * jacobian[..., 1, 1] - jacobian[..., 0, 1] * jacobian[..., 1, 0]
    singular = np.abs(det) < SINGULAR_JACOBIAN_EPS
    if np.any(singular):
        logger.warning(f"{int(singular.sum())} grid nodes have a singular cell mapping, their vectors are zeroed")
    safeDet = np.where(singular, 1.0, det)

    vx, vy = vectors[..., 0], vectors[..., 1]
    # inverse of [[a, b], [c, d]] is [[d, -b], [-c, a]] / det
    ds = (jacobian[..., 1, 1] * vx - jacobian[..., 0, 1] * vy) / safeDet
    dt = (-jacobian[..., 1, 0] * vx + jacobian[..., 0, 0] * vy) / safeDet
    parametric = np.stack([ds, dt], axis=-1)
    parametric[singular] = 0.0
    return np.ascontiguousarray(parametric, dtype=np.float32)
