# python/metalprint/resolver.py
# Decides which derived maps a physical material binds and the scalar factors that go with them.
# Exists so the live preview and the scene export share a single decision table.
# RELEVANT FILES:python/metalprint/viewer.py,python/metalprint/export.py,tests/test_resolver.py
"""Material parameter resolution.

The renderer multiplies each scalar factor by the sample of its bound map. That
is how paper preview can still bind the metalness map (needed whenever varnish
is present, since the maps travel together) while zeroing metal everywhere
with ``metalness = 0``.

==============  =========  ======  =========  =========  ===============  ======  ==========
varnish map     mode       maps    metalness  roughness  clearcoat        cc map  bump
==============  =========  ======  =========  =========  ===============  ======  ==========
yes             METAL      yes     1.0        1.0        1.0              yes     varnish_bump
yes             PAPER      yes     0.0        1.0        1.0              yes     varnish_bump
no              METAL      yes     1.0        1.0        ink_glossiness   no      0
no              PAPER      no      0.0        paper      0.0              no      0
==============  =========  ======  =========  =========  ===============  ======  ==========
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Union

from .config import PrintConfig

logger = logging.getLogger(__name__)

DEFAULT_VARNISH_BUMP = 0.02
PAPER_ENV_FACTOR = 0.2


class PreviewMode(Enum):
    METAL = "metal"
    PAPER = "paper"

    @classmethod
    def parse(cls, value: Union["PreviewMode", str]) -> "PreviewMode":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for mode in cls:
            if mode.value == key:
                return mode
        raise ValueError(f"Unknown preview mode: {value!r}")


@dataclass(frozen=True)
class MaterialParams:
    """Resolved inputs for a physical material; recomputed, never mutated."""
    use_metalness_map: bool
    use_roughness_map: bool
    use_clearcoat_map: bool
    metalness: float
    roughness: float
    clearcoat: float
    bump_scale: float
    env_intensity: float

    @property
    def clearcoat_source(self) -> str:
        if self.use_clearcoat_map:
            return "map"
        return "scalar" if self.clearcoat > 0.0 else "none"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def effective_preview_mode(requested: Union[PreviewMode, str], has_white_mask: bool) -> PreviewMode:
    """METAL preview needs a white-ink mask; without one the preview is PAPER."""
    mode = PreviewMode.parse(requested)
    if mode is PreviewMode.METAL and not has_white_mask:
        logger.debug("No white-ink mask; forcing paper preview")
        return PreviewMode.PAPER
    return mode


def resolve(
    varnish_map_exists: bool,
    preview_mode: Union[PreviewMode, str],
    config: PrintConfig,
) -> MaterialParams:
    mode = PreviewMode.parse(preview_mode)
    metal = mode is PreviewMode.METAL
    has_varnish = bool(varnish_map_exists)

    # Varnish placement only exists in the maps, so they stay bound in paper mode too.
    use_maps = metal or has_varnish

    if has_varnish:
        clearcoat = 1.0
    elif metal:
        clearcoat = float(config.ink_glossiness)
    else:
        clearcoat = 0.0

    if has_varnish:
        bump = DEFAULT_VARNISH_BUMP if config.varnish_bump is None else float(config.varnish_bump)
    else:
        bump = 0.0

    exposure = float(config.exposure)
    params = MaterialParams(
        use_metalness_map=use_maps,
        use_roughness_map=use_maps,
        use_clearcoat_map=has_varnish,
        metalness=1.0 if metal else 0.0,
        roughness=1.0 if use_maps else float(config.paper_roughness),
        clearcoat=clearcoat,
        bump_scale=bump,
        env_intensity=exposure if metal else exposure * PAPER_ENV_FACTOR,
    )
    logger.debug(f"Resolved material params for varnish={has_varnish}, mode={mode.value}: {params}")
    return params
