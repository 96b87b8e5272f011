import logging
import os
import numpy as np
from PIL import Image
from typeguard import typechecked
from .StructuredGrid2D import StructuredGrid2D
from .StructuredGridLIC2D import StructuredGridLIC2D

logger = logging.getLogger(__name__)


def licToImage(lic_result: np.ndarray, stretch: bool = True) -> Image.Image:
    """Convert a LIC scalar field to an 8 bit grayscale image (row 0 at the bottom).

    With ``stretch`` the value range is expanded to [0, 1] first; a constant
    image is left as is.
    """
    lic = np.asarray(lic_result, dtype=np.float32)
    if stretch:
        lo, hi = float(np.min(lic)), float(np.max(lic))
        if hi > lo:
            lic = (lic - lo) / (hi - lo)
    lic = np.clip(lic, 0.0, 1.0)
    # images are stored top row first, the grid's row 0 is its bottom
    lic_img = (np.flipud(lic) * 255).round().astype(np.uint8)
    return Image.fromarray(lic_img)


@typechecked
def LicRenderingSteady(grid: StructuredGrid2D, lic: StructuredGridLIC2D, saveFolder: str = "./",
                       saveName: str = "vector_field_lic", noise=None, stretch: bool = True):
    """
    Render a steady vector field on a structured grid as an LIC image and save to a PNG file.

    Returns:
        The PIL image, or None when the GPU LIC reported a failure.
    """
    outputGrid = lic.execute(grid, noise)
    if not lic.getLICSuccess():
        logger.error(f"LIC rendering of {saveName} failed (FBOSuccess={lic.getFBOSuccess()})")
        return None
    img = licToImage(outputGrid.getScalars("LIC"), stretch)

    if not os.path.exists(saveFolder):
        os.makedirs(saveFolder)
    save_name = saveName if saveName.endswith("png") else f"{saveName}.png"
    savePath = os.path.join(saveFolder, save_name)
    img.save(savePath)
    logger.info(f"Saved LIC image {savePath}")
    return img
