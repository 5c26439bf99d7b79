# python/metalprint/textures.py
# RGBA8 pixel buffers tagged with the color space the renderer must sample them in.
# Exists to decode mask/artwork images and to encode derived maps for embedding.
# RELEVANT FILES:python/metalprint/synthesis.py,python/metalprint/export.py,tests/test_textures.py

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import MaskDecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, Image.Image, np.ndarray]


class ColorSpace(Enum):
    """How a buffer must be sampled by the renderer."""
    LINEAR = "linear"  # data maps; no gamma applied
    PERCEPTUAL = "perceptual"  # display color (sRGB)


@dataclass
class Tex:
    data: np.ndarray
    color_space: ColorSpace
    path: Optional[Path] = None

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        h, w = self.data.shape[:2]
        return int(w), int(h)

    @property
    def srgb(self) -> bool:
        return self.color_space is ColorSpace.PERCEPTUAL

    def channel(self, index: int = 0) -> np.ndarray:
        return self.data[..., index]


def as_rgba8(arr: np.ndarray) -> np.ndarray:
    """Return a C-contiguous (H, W, 4) uint8 copy of *arr*.

    Accepts (H, W) grayscale, (H, W, 3) RGB and (H, W, 4) RGBA. Grayscale is
    replicated into R, G and B; missing alpha is filled with 255.
    """
    if not isinstance(arr, np.ndarray):
        raise MaskDecodeError("texture must be a numpy array")

    if arr.dtype != np.uint8:
        raise MaskDecodeError(f"texture dtype must be uint8, got {arr.dtype}")

    if arr.ndim == 2:
        arr = arr[..., None]
    if arr.ndim != 3 or arr.shape[2] not in (1, 3, 4):
        raise MaskDecodeError(f"texture must be (H,W), (H,W,3) or (H,W,4), got {arr.shape}")

    h, w, c = arr.shape
    if h == 0 or w == 0:
        raise MaskDecodeError("texture must have non-zero width and height")

    rgba = np.empty((h, w, 4), dtype=np.uint8)
    if c in (1, 3):
        rgba[..., :3] = arr
        rgba[..., 3] = 255
    else:
        rgba[...] = arr
    return rgba


def _decode(source: ImageSource) -> Tuple[np.ndarray, Optional[Path]]:
    if isinstance(source, np.ndarray):
        return as_rgba8(source), None

    if isinstance(source, Image.Image):
        # pixels load lazily; a truncated file only fails here
        try:
            rgba = np.asarray(source.convert("RGBA"))
        except (OSError, UnidentifiedImageError) as exc:
            raise MaskDecodeError(f"could not decode image {source!r}: {exc}") from exc
        return as_rgba8(rgba), None

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            with Image.open(path) as im:
                rgba = np.asarray(im.convert("RGBA"))
        except (OSError, UnidentifiedImageError) as exc:
            raise MaskDecodeError(f"could not decode image {path}: {exc}") from exc
        return as_rgba8(rgba), path

    raise MaskDecodeError(f"unsupported image source: {type(source).__name__}")


def load_mask(source: Union[Tex, ImageSource]) -> Tex:
    """Decode a grayscale mask into a linear RGBA8 buffer.

    Only the red channel carries meaning. A mask whose green or blue channel
    differs from red is accepted but logged. An already decoded linear
    :class:`Tex` is returned as is.
    """
    if isinstance(source, Tex):
        if source.color_space is ColorSpace.LINEAR:
            return source
        return Tex(data=source.data, color_space=ColorSpace.LINEAR, path=source.path)
    data, path = _decode(source)
    rgb = data[..., :3]
    if not (np.array_equal(rgb[..., 0], rgb[..., 1]) and np.array_equal(rgb[..., 0], rgb[..., 2])):
        logger.warning(f"mask {path or '<array>'} is not grayscale; only the red channel is used")
    return Tex(data=data, color_space=ColorSpace.LINEAR, path=path)


def load_artwork(source: ImageSource) -> Tex:
    """Decode the printed artwork as a perceptual (sRGB) RGBA8 buffer."""
    data, path = _decode(source)
    return Tex(data=data, color_space=ColorSpace.PERCEPTUAL, path=path)


def encode_png(tex: Tex) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(tex.data).save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(tex: Tex) -> str:
    """Encode *tex* as an inline ``data:image/png;base64`` URL."""
    payload = base64.b64encode(encode_png(tex)).decode("ascii")
    return f"data:image/png;base64,{payload}"
