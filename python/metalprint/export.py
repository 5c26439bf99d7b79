# python/metalprint/export.py
"""Standalone scene description export.

Builds a self-contained, JSON-serializable description of the print preview
scene: a plane sized to the artwork's aspect ratio, a physical material, and
every bound texture embedded as a PNG data URL tagged with its color space.
The material parameters come from :func:`metalprint.resolver.resolve`, the same
call the interactive session makes, so an exported scene matches the preview.

Example usage:
    from metalprint import load_config, synthesize
    from metalprint.export import build_scene
    from metalprint.textures import load_artwork

    maps = synthesize("white.png", "varnish.png", 0.2, 1.0)
    scene = build_scene(load_artwork("cmyk.png"), maps, load_config(), "metal")
    html_payload = scene.to_json()
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .config import PrintConfig
from .materials import CLEARCOAT_ROUGHNESS, REFLECTIVITY
from .resolver import MaterialParams, PreviewMode, effective_preview_mode, resolve
from .synthesis import DerivedMaps
from .textures import Tex, to_data_url

logger = logging.getLogger(__name__)

SCENE_FORMAT_VERSION = 1
PLANE_WIDTH = 10.0
TONE_MAPPING = "aces"


@dataclass
class TextureRef:
    """Inline texture reference."""

    uri: str
    """``data:image/png;base64`` payload."""

    color_space: str
    """``linear`` for data maps, ``perceptual`` for artwork."""

    def to_dict(self) -> dict:
        return {"uri": self.uri, "color_space": self.color_space}

    @classmethod
    def from_tex(cls, tex: Tex) -> "TextureRef":
        return cls(uri=to_data_url(tex), color_space=tex.color_space.value)


@dataclass
class SceneDescription:
    """Everything a standalone viewer needs to rebuild the preview."""

    preview_mode: PreviewMode
    aspect_ratio: float
    config: PrintConfig
    params: MaterialParams
    textures: Dict[str, TextureRef] = field(default_factory=dict)

    @property
    def plane_size(self) -> Tuple[float, float]:
        return PLANE_WIDTH, PLANE_WIDTH / self.aspect_ratio

    def material_dict(self) -> dict:
        p = self.params
        return {
            "base_color_texture": "base_color" if "base_color" in self.textures else None,
            "metalness_texture": "metalness" if "metalness" in self.textures else None,
            "roughness_texture": "roughness" if "roughness" in self.textures else None,
            "clearcoat_texture": "clearcoat" if "clearcoat" in self.textures else None,
            # varnish height is read from the clearcoat map
            "bump_texture": "clearcoat" if "clearcoat" in self.textures else None,
            "metalness": p.metalness,
            "roughness": p.roughness,
            "clearcoat": p.clearcoat,
            "clearcoat_roughness": CLEARCOAT_ROUGHNESS,
            "reflectivity": REFLECTIVITY,
            "bump_scale": p.bump_scale if "clearcoat" in self.textures else 0.0,
            "env_intensity": p.env_intensity,
        }

    def to_dict(self) -> dict:
        width, height = self.plane_size
        return {
            "version": SCENE_FORMAT_VERSION,
            "preview_mode": self.preview_mode.value,
            "background": list(self.config.background_rgba),
            "tone_mapping": {
                "operator": TONE_MAPPING,
                "exposure": self.config.tone_mapping_exposure,
            },
            "plane": {"width": width, "height": height},
            "config": self.config.to_dict(),
            "params": self.params.to_dict(),
            "material": self.material_dict(),
            "textures": {name: ref.to_dict() for name, ref in self.textures.items()},
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def build_scene(
    artwork: Tex,
    maps: Optional[DerivedMaps],
    config: PrintConfig,
    preview_mode: Union[PreviewMode, str],
    aspect_ratio: Optional[float] = None,
) -> SceneDescription:
    """Resolve material parameters and embed the textures they bind.

    ``aspect_ratio`` defaults to the artwork's width / height. A METAL request
    falls back to PAPER when *maps* carry no white-ink mask.
    """
    if aspect_ratio is None:
        w, h = artwork.size
        aspect_ratio = w / h
    if aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")

    mode = effective_preview_mode(preview_mode, maps is not None and maps.has_white_mask)
    params = resolve(maps is not None and maps.has_varnish, mode, config)

    textures: Dict[str, TextureRef] = {"base_color": TextureRef.from_tex(artwork)}
    if maps is not None:
        if params.use_metalness_map:
            textures["metalness"] = TextureRef.from_tex(maps.metalness)
        if params.use_roughness_map:
            textures["roughness"] = TextureRef.from_tex(maps.roughness)
        if params.use_clearcoat_map and maps.clearcoat is not None:
            textures["clearcoat"] = TextureRef.from_tex(maps.clearcoat)

    logger.info(f"Built scene description: mode={mode.value}, textures={sorted(textures)}")
    return SceneDescription(
        preview_mode=mode,
        aspect_ratio=float(aspect_ratio),
        config=config.copy(),
        params=params,
        textures=textures,
    )


def export_scene_json(
    artwork: Tex,
    maps: Optional[DerivedMaps],
    config: PrintConfig,
    preview_mode: Union[PreviewMode, str],
    aspect_ratio: Optional[float] = None,
    indent: Optional[int] = None,
) -> str:
    return build_scene(artwork, maps, config, preview_mode, aspect_ratio).to_json(indent=indent)


def scene_summary(scene: SceneDescription) -> Dict[str, Any]:
    """Small human-facing digest (no payloads) for logs and status bars."""
    return {
        "mode": "paper" if scene.preview_mode is PreviewMode.PAPER else "metal + white ink",
        "varnish": scene.params.use_clearcoat_map,
        "aspect_ratio": round(scene.aspect_ratio, 2),
        "textures": sorted(scene.textures),
    }
