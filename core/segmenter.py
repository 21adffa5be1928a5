"""Corner-colour background removal."""
from __future__ import annotations

import logging
from typing import Callable, Optional

import numpy as np

from core.errors import InvalidImage
from core.raster import Raster, check_dimensions

logger = logging.getLogger(__name__)

# Euclidean RGB distance below which a pixel counts as background.
BACKGROUND_THRESHOLD = 50

PHASE_ANALYZING = "Analyzing image..."
PHASE_REMOVING = "Removing background..."
PHASE_COMPLETE = "Complete!"


def corner_mean(pixels: np.ndarray) -> np.ndarray:
    """Mean RGB of the four corner pixels, as float64."""
    height, width = pixels.shape[:2]
    corners = pixels[[0, 0, height - 1, height - 1], [0, width - 1, 0, width - 1], :3]
    return corners.astype(np.float64).mean(axis=0)


def segment(raster: Raster, threshold: float = BACKGROUND_THRESHOLD) -> Raster:
    """
    Return a copy of the raster with background pixels made transparent.

    A pixel is background when its RGB distance to the mean corner colour is
    below ``threshold``; only its alpha changes. Every other pixel, including
    its existing alpha, is kept as is. Matching pixels anywhere in the image
    are cleared, not only those connected to the border.
    """
    if raster is None:
        raise InvalidImage("No image to segment")
    check_dimensions(raster.width, raster.height)

    pixels = raster.writable_copy()
    avg = corner_mean(pixels)
    diff = pixels[:, :, :3].astype(np.float64) - avg
    distance = np.sqrt(np.sum(diff * diff, axis=2))
    background = distance < threshold
    pixels[background, 3] = 0
    logger.debug(
        "Segmented %dx%d raster: %d background pixels (corner mean %s)",
        raster.width,
        raster.height,
        int(background.sum()),
        np.round(avg, 2).tolist(),
    )
    return Raster(pixels)


def remove_background(
    raster: Raster,
    on_phase: Optional[Callable[[str], None]] = None,
    threshold: float = BACKGROUND_THRESHOLD,
) -> Raster:
    """Run segment() with optional progress phases reported through on_phase."""

    def report(phase: str) -> None:
        if on_phase is not None:
            on_phase(phase)

    report(PHASE_ANALYZING)
    check_dimensions(raster.width, raster.height)
    report(PHASE_REMOVING)
    foreground = segment(raster, threshold)
    report(PHASE_COMPLETE)
    logger.info("Background removed from %dx%d image", raster.width, raster.height)
    return foreground
