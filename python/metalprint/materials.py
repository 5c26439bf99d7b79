# python/metalprint/materials.py
# Physical material record with its bound artwork and data maps.
# Exists to hand a renderer one object that already follows the resolved parameters.
# RELEVANT FILES:python/metalprint/resolver.py,python/metalprint/textures.py,tests/test_materials.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .resolver import MaterialParams
from .synthesis import DerivedMaps
from .textures import ColorSpace, Tex

CLEARCOAT_ROUGHNESS = 0.1
REFLECTIVITY = 0.5


@dataclass
class PhysicalMaterial:
    base_color: Optional[Tex] = None
    metalness_map: Optional[Tex] = None
    roughness_map: Optional[Tex] = None
    clearcoat_map: Optional[Tex] = None
    bump_map: Optional[Tex] = None
    metalness: float = 0.0
    roughness: float = 1.0
    clearcoat: float = 0.0
    clearcoat_roughness: float = CLEARCOAT_ROUGHNESS
    reflectivity: float = REFLECTIVITY
    bump_scale: float = 0.0
    env_intensity: float = 1.0


def _require_space(tex: Optional[Tex], space: ColorSpace, label: str) -> Optional[Tex]:
    if tex is not None and tex.color_space is not space:
        raise ValueError(f"{label} must be tagged {space.value}, got {tex.color_space.value}")
    return tex


def bind_material(
    params: MaterialParams,
    maps: Optional[DerivedMaps],
    artwork: Optional[Tex] = None,
) -> PhysicalMaterial:
    """Attach maps to a material exactly as *params* dictates.

    The clearcoat map doubles as the bump map, since it is high wherever varnish
    is laid down. Flags that request a map which was never synthesized leave the
    slot empty; the scalar still applies.
    """
    _require_space(artwork, ColorSpace.PERCEPTUAL, "artwork")

    metal_map = rough_map = coat_map = None
    if maps is not None:
        if params.use_metalness_map:
            metal_map = _require_space(maps.metalness, ColorSpace.LINEAR, "metalness map")
        if params.use_roughness_map:
            rough_map = _require_space(maps.roughness, ColorSpace.LINEAR, "roughness map")
        if params.use_clearcoat_map:
            coat_map = _require_space(maps.clearcoat, ColorSpace.LINEAR, "clearcoat map")

    return PhysicalMaterial(
        base_color=artwork,
        metalness_map=metal_map,
        roughness_map=rough_map,
        clearcoat_map=coat_map,
        bump_map=coat_map,
        metalness=params.metalness,
        roughness=params.roughness,
        clearcoat=params.clearcoat,
        bump_scale=params.bump_scale if coat_map is not None else 0.0,
        env_intensity=params.env_intensity,
    )
