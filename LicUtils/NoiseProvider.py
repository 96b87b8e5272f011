import logging
import numpy as np
from PIL import Image
from .errors import InvalidParameterError

logger = logging.getLogger(__name__)


def lic_noise(size, seed=0) -> np.ndarray:
    """
    Generate a random noise background for LIC visualization.

    Args:
        size: Tuple of int, size of the noise image (width, height).
        seed: Int, seed of the pseudo random generator.

    Returns:
        A (height, width) float32 array uniform in [0, 1).
    """
    width, height = size
    rng = np.random.default_rng(seed)
    return rng.random((height, width), dtype=np.float32)


def resampleNearest(noise: np.ndarray, width: int, height: int) -> np.ndarray:
    image = Image.fromarray(np.ascontiguousarray(noise, dtype=np.float32))
    image = image.resize((width, height), Image.NEAREST)
    return np.asarray(image, dtype=np.float32)


class NoiseProvider:
    """Supplies the noise texture data at the magnified LIC resolution.

    External noise, when given, always wins over internal generation. Internal
    noise is cached and only regenerated when the requested size or the seed
    changes, so repeated executions with the same parameters reuse it.
    """

    def __init__(self, seed: int = 0):
        self.seed = int(seed)
        self._cachedKey = None
        self._cachedNoise = None

    def setSeed(self, seed: int) -> None:
        self.seed = int(seed)

    def getNoise(self, width: int, height: int, externalNoise=None) -> np.ndarray:
        if externalNoise is not None:
            return self.prepareExternalNoise(externalNoise, width, height)
        key = (width, height, self.seed)
        if self._cachedKey != key:
            logger.debug(f"Generating {width}x{height} noise with seed {self.seed}")
            self._cachedNoise = lic_noise((width, height), self.seed)
            self._cachedKey = key
        return self._cachedNoise

    def prepareExternalNoise(self, noise, width: int, height: int) -> np.ndarray:
        if isinstance(noise, Image.Image):
            noise = np.asarray(noise.convert('F'), dtype=np.float32) / 255.0
        noise = np.asarray(noise, dtype=np.float32)
        if noise.ndim == 3:
            # multi component noise images: the first component drives the convolution
            noise = noise[:, :, 0]
        if noise.ndim != 2 or noise.size == 0:
            raise InvalidParameterError(f"Noise input must be a non-empty 2D image, got shape {noise.shape}")
        if not np.all(np.isfinite(noise)):
            raise InvalidParameterError("Noise input contains non-finite values")
        if noise.shape != (height, width):
            logger.debug(f"Resampling noise {noise.shape[1]}x{noise.shape[0]} to {width}x{height}")
            noise = resampleNearest(noise, width, height)
        return np.ascontiguousarray(noise)

    def clear(self) -> None:
        self._cachedKey = None
        self._cachedNoise = None
