"""RGBA raster container plus decode and Qt conversion helpers."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np
from PySide6.QtGui import QImage

from core.errors import InvalidImage


@dataclass(frozen=True, eq=False)
class Raster:
    """
    Immutable RGBA pixel buffer.

    ``pixels`` has shape (height, width, 4), dtype uint8, straight (non-premultiplied) alpha.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise TypeError("pixels must be a numpy.ndarray")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidImage(f"Expected an (h, w, 4) RGBA array, got shape {pixels.shape}")
        if pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise InvalidImage(
                f"Raster has an empty dimension: {pixels.shape[1]}x{pixels.shape[0]}",
                width=pixels.shape[1],
                height=pixels.shape[0],
            )
        frozen = np.array(pixels, dtype=np.uint8, copy=True, order="C")
        frozen.flags.writeable = False
        object.__setattr__(self, "pixels", frozen)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def writable_copy(self) -> np.ndarray:
        """Return a mutable copy of the pixel buffer."""
        return self.pixels.copy()

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))


def check_dimensions(width: int, height: int) -> None:
    """Raise InvalidImage for a width or height below one pixel."""
    if width < 1 or height < 1:
        raise InvalidImage(f"Invalid image size {width}x{height}", width=width, height=height)


def decode_raster(data: bytes) -> Raster:
    """Decode encoded image bytes (PNG, JPEG, ...) into an RGBA raster."""
    buffer = np.frombuffer(data, dtype=np.uint8)
    if buffer.size == 0:
        raise InvalidImage("Image data is empty")
    image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise InvalidImage("Failed to decode image data")

    if image.dtype != np.uint8:
        # 16-bit PNG/TIFF: scale down to 8 bits per channel.
        image = (image / 257).astype(np.uint8) if image.dtype == np.uint16 else image.astype(np.uint8)
    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.shape[2] == 3:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    elif image.shape[2] == 4:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        raise InvalidImage(f"Unsupported channel count: {image.shape[2]}")
    return Raster(rgba)


def load_raster(file_path: Path) -> Raster:
    """
    Load an image file as an RGBA raster.

    :raises FileNotFoundError: if the file does not exist.
    :raises InvalidImage: if the file cannot be decoded.
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Image file not found: {file_path}")
    return decode_raster(file_path.read_bytes())


def raster_to_qimage(raster: Raster) -> QImage:
    """Copy a raster into a detached QImage (Format_RGBA8888)."""
    data = raster.tobytes()
    image = QImage(data, raster.width, raster.height, raster.width * 4, QImage.Format.Format_RGBA8888)
    return image.copy()


def raster_from_qimage(image: QImage) -> Raster:
    """Copy any QImage into a raster with straight alpha."""
    if image.isNull():
        raise InvalidImage("Image is null")
    check_dimensions(image.width(), image.height())
    rgba = image.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = rgba.width(), rgba.height()
    stride = rgba.bytesPerLine()
    buffer = np.frombuffer(rgba.constBits(), dtype=np.uint8, count=stride * height)
    pixels = buffer.reshape(height, stride)[:, : width * 4].reshape(height, width, 4)
    return Raster(pixels)
