# python/metalprint/viewer.py
# Headless state model of the interactive print preview
# Exists to keep maps, preview mode and material in step as inputs change
# RELEVANT FILES: python/metalprint/synthesis.py, python/metalprint/resolver.py, python/metalprint/export.py, tests/test_preview_session.py
"""Interactive preview session.

A :class:`PreviewSession` owns what an on-screen viewer shows: the artwork, the
white-ink and varnish masks, the requested preview mode and the derived maps.
Maps are re-synthesized when a mask changes or when a roughness scalar changes.
Every other config change only needs the material to be re-resolved.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .config import SYNTHESIS_FIELDS, ConfigSource, PrintConfig, load_config
from .errors import SynthesisError
from .export import SceneDescription, build_scene
from .materials import PhysicalMaterial, bind_material
from .resolver import MaterialParams, PreviewMode, effective_preview_mode, resolve
from .synthesis import DerivedMaps, synthesize
from .textures import ImageSource, Tex, load_artwork, load_mask

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 10.0 / 14.0


class PreviewSession:
    """Mutable preview state; every derived value is recomputed from it."""

    def __init__(self, config: ConfigSource = None, preview_mode: Union[PreviewMode, str] = PreviewMode.METAL):
        self._config = load_config(config)
        self._requested_mode = PreviewMode.parse(preview_mode)
        self._artwork: Optional[Tex] = None
        self._white: Optional[Tex] = None
        self._varnish: Optional[Tex] = None
        self._maps: Optional[DerivedMaps] = None
        self.synthesis_count = 0

    # ------------------------------------------------------------------ inputs

    @property
    def config(self) -> PrintConfig:
        return self._config.copy()

    @property
    def artwork(self) -> Optional[Tex]:
        return self._artwork

    @property
    def maps(self) -> Optional[DerivedMaps]:
        return self._maps

    @property
    def has_white_mask(self) -> bool:
        return self._white is not None

    @property
    def has_varnish(self) -> bool:
        return self._maps is not None and self._maps.has_varnish

    def set_artwork(self, source: Optional[ImageSource]) -> None:
        self._artwork = load_artwork(source) if source is not None else None

    def set_white_mask(self, source: Optional[ImageSource]) -> None:
        white = load_mask(source) if source is not None else None
        self._maps = self._synthesize(white, self._varnish, self._config)
        self._white = white

    def set_varnish_mask(self, source: Optional[ImageSource]) -> None:
        varnish = load_mask(source) if source is not None else None
        self._maps = self._synthesize(self._white, varnish, self._config)
        self._varnish = varnish

    def set_preview_mode(self, mode: Union[PreviewMode, str]) -> PreviewMode:
        self._requested_mode = PreviewMode.parse(mode)
        return self.preview_mode

    def update_config(self, **changes: Any) -> PrintConfig:
        """Apply *changes* (snake_case or camelCase keys) and validate them.

        Maps are rebuilt only when a roughness scalar the synthesizer reads changed.
        """
        new = load_config(self._config, overrides=changes)
        changed = new.changed_fields(self._config)
        if changed & SYNTHESIS_FIELDS:
            self._maps = self._synthesize(self._white, self._varnish, new)
        else:
            logger.debug(f"Config change {sorted(changed)} does not affect maps")
        self._config = new
        return self.config

    # ----------------------------------------------------------------- derived

    @property
    def preview_mode(self) -> PreviewMode:
        return effective_preview_mode(self._requested_mode, self.has_white_mask)

    @property
    def aspect_ratio(self) -> float:
        if self._artwork is None:
            return DEFAULT_ASPECT_RATIO
        w, h = self._artwork.size
        return w / h

    def params(self) -> MaterialParams:
        return resolve(self.has_varnish, self.preview_mode, self._config)

    def material(self) -> PhysicalMaterial:
        return bind_material(self.params(), self._maps, self._artwork)

    def export_scene(self) -> SceneDescription:
        if self._artwork is None:
            raise RuntimeError("Load the artwork before exporting a scene")
        return build_scene(self._artwork, self._maps, self._config, self.preview_mode, self.aspect_ratio)

    def _synthesize(self, white: Optional[Tex], varnish: Optional[Tex], config: PrintConfig) -> Optional[DerivedMaps]:
        if white is None and varnish is None:
            # nothing to derive from; the preview falls back to plain paper
            return None
        try:
            maps = synthesize(
                white,
                varnish,
                config.metal_roughness,
                config.paper_roughness,
            )
        except SynthesisError as exc:
            logger.error(f"Failed to process textures: {exc}")
            raise
        self.synthesis_count += 1
        return maps
