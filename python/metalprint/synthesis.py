# python/metalprint/synthesis.py
# Derives metalness/roughness/clearcoat maps from white-ink and spot-varnish masks.
# Exists to turn print separation masks into linear PBR data maps.
# RELEVANT FILES:python/metalprint/textures.py,python/metalprint/resolver.py,tests/test_synthesis.py
"""Map synthesis for metallic-substrate print previews.

Both input masks are authored "dark = feature present": black in the white-ink
mask means ink is laid down, black in the varnish mask means varnish. Samples
are inverted (``255 - v``) so that internally a high value means the feature is
present. Only the red channel of each mask is read.

Per pixel, with ``r`` the inverted white-ink sample:

- metalness is ``255 - r`` (open metal where there is no ink),
- a pixel is varnished when the inverted varnish sample exceeds
  :data:`VARNISH_THRESHOLD`; varnish is a hard cutoff, never a blend,
- clearcoat is 255 on varnished pixels and 0 elsewhere,
- roughness is :data:`VARNISH_ROUGHNESS` on varnished pixels, otherwise a
  linear blend from the metal roughness to the paper roughness driven by
  ``r / 255`` so ink edges stay free of banding.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from .errors import MaskDecodeError, NoMaskError, ResolutionMismatchError, SynthesisError
from .textures import ColorSpace, ImageSource, Tex, load_mask

logger = logging.getLogger(__name__)

# Inverted varnish samples strictly above this are varnished.
VARNISH_THRESHOLD = 100
# Roughness written under varnish (0..255), i.e. near-mirror gloss.
VARNISH_ROUGHNESS = 5
DEFAULT_SIZE: Tuple[int, int] = (1024, 1024)

__all__ = [
    "VARNISH_THRESHOLD",
    "VARNISH_ROUGHNESS",
    "DEFAULT_SIZE",
    "SynthesisError",
    "NoMaskError",
    "MaskDecodeError",
    "ResolutionMismatchError",
    "DerivedMaps",
    "working_size",
    "synthesize",
]


@dataclass(frozen=True)
class DerivedMaps:
    metalness: Tex
    roughness: Tex
    clearcoat: Optional[Tex] = None
    has_white_mask: bool = True

    @property
    def has_varnish(self) -> bool:
        return self.clearcoat is not None

    @property
    def size(self) -> Tuple[int, int]:
        return self.metalness.size


def working_size(
    white: Optional[Tex],
    varnish: Optional[Tex],
    default_size: Tuple[int, int] = DEFAULT_SIZE,
) -> Tuple[int, int]:
    """Output (width, height): white mask first, then varnish, then *default_size*."""
    if white is not None:
        return white.size
    if varnish is not None:
        return varnish.size
    return int(default_size[0]), int(default_size[1])


def _gray_map(values: np.ndarray) -> Tex:
    h, w = values.shape
    out = np.empty((h, w, 4), dtype=np.uint8)
    out[..., :3] = values[..., None]
    out[..., 3] = 255
    return Tex(data=out, color_space=ColorSpace.LINEAR)


def _roughness_endpoints(metal_roughness: float, paper_roughness: float) -> Tuple[int, int]:
    metal = int(np.floor(min(1.0, max(0.0, float(metal_roughness))) * 255.0))
    paper = int(np.floor(min(255.0, float(paper_roughness) * 255.0)))
    return metal, paper


def synthesize(
    white_mask: Optional[Union[Tex, ImageSource]],
    varnish_mask: Optional[Union[Tex, ImageSource]],
    metal_roughness: float,
    paper_roughness: float,
    default_size: Tuple[int, int] = DEFAULT_SIZE,
) -> DerivedMaps:
    """Derive metalness, roughness and (optionally) clearcoat maps.

    Parameters
    ----------
    white_mask, varnish_mask : path, PIL image, numpy array, Tex or None
        Masks in "dark = present" polarity. At least one is required.
    metal_roughness, paper_roughness : float
        Roughness in [0, 1] of bare metal and of fully inked paper.
    default_size : (width, height)
        Resolution used only when no mask provides one.

    Returns
    -------
    DerivedMaps
        Freshly allocated linear RGBA8 buffers. ``clearcoat`` is None unless a
        varnish mask was given. ``has_white_mask`` records whether the metal
        preview is available.

    Raises
    ------
    NoMaskError
        Both masks are None.
    MaskDecodeError
        A supplied mask cannot be decoded.
    ResolutionMismatchError
        Both masks are given with different sizes. Masks are never resampled;
        callers must pre-align them.
    """
    if white_mask is None and varnish_mask is None:
        raise NoMaskError("No textures to process: supply a white-ink mask, a varnish mask, or both")

    white = load_mask(white_mask) if white_mask is not None else None
    varnish = load_mask(varnish_mask) if varnish_mask is not None else None

    if white is not None and varnish is not None and white.size != varnish.size:
        raise ResolutionMismatchError(
            f"white-ink mask is {white.size[0]}x{white.size[1]} but varnish mask is "
            f"{varnish.size[0]}x{varnish.size[1]}"
        )

    width, height = working_size(white, varnish, default_size)
    t0 = time.perf_counter()

    if white is not None:
        ink = 255 - white.channel(0).astype(np.int32)
    else:
        # No white-ink mask: the whole sheet is printed paper.
        ink = np.full((height, width), 255, dtype=np.int32)

    metalness = (255 - ink).astype(np.uint8)

    if varnish is not None:
        varnished = (255 - varnish.channel(0).astype(np.int32)) > VARNISH_THRESHOLD
    else:
        varnished = np.zeros((height, width), dtype=bool)

    metal_rough, paper_rough = _roughness_endpoints(metal_roughness, paper_roughness)
    blend = metal_rough + (ink.astype(np.float64) / 255.0) * (paper_rough - metal_rough)
    blend = np.clip(np.rint(blend), 0, 255).astype(np.uint8)
    roughness = np.where(varnished, np.uint8(VARNISH_ROUGHNESS), blend).astype(np.uint8)

    clearcoat = None
    if varnish is not None:
        clearcoat = _gray_map(np.where(varnished, 255, 0).astype(np.uint8))

    maps = DerivedMaps(
        metalness=_gray_map(metalness),
        roughness=_gray_map(roughness),
        clearcoat=clearcoat,
        has_white_mask=white is not None,
    )
    logger.debug(
        f"Synthesized {width}x{height} maps in {(time.perf_counter() - t0) * 1000.0:.1f} ms "
        f"(white={'yes' if white is not None else 'no'}, varnish={'yes' if varnish is not None else 'no'}, "
        f"roughness {metal_rough}->{paper_rough})"
    )
    return maps
