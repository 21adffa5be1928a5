"""Letterboxed ("contain") placement of an image inside a display container."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from core.errors import InvalidTransform


@dataclass(frozen=True)
class ViewportTransform:
    """
    Mapping between edit space (container pixels) and intrinsic space (image pixels).

    Never mutated; compute a new one with fit() whenever the container or image changes.
    """

    intrinsic_width: float
    intrinsic_height: float
    displayed_width: float
    displayed_height: float
    offset_x: float
    offset_y: float
    scale_x: float
    scale_y: float

    def to_intrinsic(self, ex: float, ey: float) -> Tuple[float, float]:
        """Map an edit-space point to intrinsic pixel coordinates."""
        return (ex - self.offset_x) * self.scale_x, (ey - self.offset_y) * self.scale_y

    def to_edit(self, ix: float, iy: float) -> Tuple[float, float]:
        """Map an intrinsic pixel coordinate back to edit space."""
        return ix / self.scale_x + self.offset_x, iy / self.scale_y + self.offset_y

    def displayed_rect(self) -> Tuple[float, float, float, float]:
        """(x, y, width, height) of the image inside the container."""
        return self.offset_x, self.offset_y, self.displayed_width, self.displayed_height

    def contains(self, ex: float, ey: float) -> bool:
        """True if an edit-space point lies on the displayed image."""
        return (
            self.offset_x <= ex <= self.offset_x + self.displayed_width
            and self.offset_y <= ey <= self.offset_y + self.displayed_height
        )


def fit(intrinsic_w: float, intrinsic_h: float, container_w: float, container_h: float) -> ViewportTransform:
    """
    Fit an image into a container preserving aspect ratio.

    Exactly one axis gets letterbox padding unless the aspect ratios match.

    :raises InvalidTransform: if the image or container has zero area.
    """
    if container_w <= 0 or container_h <= 0:
        raise InvalidTransform(f"Container has no area: {container_w}x{container_h}")
    if intrinsic_w <= 0 or intrinsic_h <= 0:
        raise InvalidTransform(f"Image has no area: {intrinsic_w}x{intrinsic_h}")

    image_ar = intrinsic_w / intrinsic_h
    container_ar = container_w / container_h

    if image_ar > container_ar:
        displayed_w = float(container_w)
        displayed_h = min(displayed_w / image_ar, float(container_h))
        offset_x = 0.0
        offset_y = (container_h - displayed_h) / 2
    else:
        displayed_h = float(container_h)
        displayed_w = min(displayed_h * image_ar, float(container_w))
        offset_y = 0.0
        offset_x = (container_w - displayed_w) / 2

    return ViewportTransform(
        intrinsic_width=float(intrinsic_w),
        intrinsic_height=float(intrinsic_h),
        displayed_width=displayed_w,
        displayed_height=displayed_h,
        offset_x=offset_x,
        offset_y=offset_y,
        scale_x=intrinsic_w / displayed_w,
        scale_y=intrinsic_h / displayed_h,
    )
