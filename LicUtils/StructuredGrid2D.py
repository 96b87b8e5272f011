import numpy as np
from scipy import ndimage
from typeguard import typechecked


class StructuredGrid2D:
    """A single-layer structured grid: a lattice of points with point data attached.

    Points are stored as an array of shape (Ydim, Xdim, 2) (a third z column is
    accepted and dropped); row j, column i is the lattice node (i, j). The
    positions may be curvilinear and non uniformly spaced.

    Args:
        points (np.ndarray): (Ydim, Xdim, 2|3) physical node positions.
        vectors (np.ndarray, optional): (Ydim, Xdim, 2|3) point vector field.
    """

    @typechecked
    def __init__(self, points: np.ndarray, vectors=None):
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 3 or points.shape[2] not in (2, 3):
            raise ValueError(f"points must have shape (Ydim, Xdim, 2|3), got {points.shape}")
        self.points = np.ascontiguousarray(points[:, :, :2])
        self.Ydim, self.Xdim = self.points.shape[:2]
        self.vectors = None
        self.pointScalars = {}
        if vectors is not None:
            self.setVectors(vectors)

    @classmethod
    def uniform(cls, Xdim: int, Ydim: int, domainMinBoundary=(-2.0, -2.0), domainMaxBoundary=(2.0, 2.0)):
        """Axis aligned grid with constant spacing, like SteadyVectorField2D's lattice."""
        xs = np.linspace(domainMinBoundary[0], domainMaxBoundary[0], Xdim)
        ys = np.linspace(domainMinBoundary[1], domainMaxBoundary[1], Ydim)
        x, y = np.meshgrid(xs, ys)
        return cls(np.stack([x, y], axis=-1))

    @classmethod
    def fromDimensions(cls, Xdim: int, Ydim: int):
        """Empty output container: points at lattice indices until allocated."""
        return cls.uniform(Xdim, Ydim, (0.0, 0.0), (float(max(Xdim - 1, 1)), float(max(Ydim - 1, 1))))

    def setVectors(self, vectors):
        vectors = np.asarray(vectors, dtype=np.float32)
        if vectors.ndim != 3 or vectors.shape[:2] != (self.Ydim, self.Xdim) or vectors.shape[2] not in (2, 3):
            raise ValueError(f"vectors must have shape ({self.Ydim}, {self.Xdim}, 2|3), got {vectors.shape}")
        self.vectors = np.ascontiguousarray(vectors[:, :, :2])

    def getDimensions(self) -> tuple:
        return (self.Xdim, self.Ydim)

    def isDegenerate(self) -> bool:
        return self.Xdim < 2 or self.Ydim < 2

    def allocateScalars(self, Xdim: int, Ydim: int, name: str = "LIC") -> np.ndarray:
        """Resize the container to Xdim x Ydim and attach a fresh float32 point scalar array."""
        if (Xdim, Ydim) != (self.Xdim, self.Ydim):
            self.points = np.zeros((Ydim, Xdim, 2), dtype=np.float64)
            self.Xdim, self.Ydim = Xdim, Ydim
        self.vectors = None
        self.pointScalars = {name: np.zeros((Ydim, Xdim), dtype=np.float32)}
        return self.pointScalars[name]

    def getScalars(self, name: str = "LIC"):
        return self.pointScalars.get(name)

    def magnifiedPoints(self, magnification: int) -> np.ndarray:
        """Bilinear, corner aligned upsampling of the node positions.

        Output node (i, j) of the magnified lattice lies at normalized position
        (i / (outXdim-1), j / (outYdim-1)) of the input lattice.
        """
        if magnification == 1:
            return self.points.copy()
        outY, outX = self.Ydim * magnification, self.Xdim * magnification
        rows = np.linspace(0.0, self.Ydim - 1, outY)
        cols = np.linspace(0.0, self.Xdim - 1, outX)
        coords = np.meshgrid(rows, cols, indexing="ij")
        upsampled = [ndimage.map_coordinates(self.points[:, :, k], coords, order=1, mode="nearest")
                     for k in range(2)]
        return np.stack(upsampled, axis=-1)

    def __repr__(self):
        arrays = ["vectors"] if self.vectors is not None else []
        arrays += list(self.pointScalars.keys())
        return f"StructuredGrid2D(Xdim={self.Xdim}, Ydim={self.Ydim}, pointData={arrays})"
