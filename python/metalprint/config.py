# python/metalprint/config.py
# Print preview configuration parsing and validation
# Exists to keep user-adjustable material scalars in one validated structure
# RELEVANT FILES: python/metalprint/resolver.py, python/metalprint/viewer.py, tests/test_print_config.py
from __future__ import annotations

import copy
import json
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

ConfigSource = Union["PrintConfig", Mapping[str, Any], str, Path, None]

_HEX_COLOR = re.compile(r"^#?[0-9a-fA-F]{6}$")

# Normalized key -> field name. Accepts snake_case and the camelCase keys used by
# browser front-ends.
_KEY_ALIASES: Dict[str, str] = {
    "metalroughness": "metal_roughness",
    "paperroughness": "paper_roughness",
    "paperroughnessscalar": "paper_roughness",
    "inkglossiness": "ink_glossiness",
    "exposure": "exposure",
    "tonemappingexposure": "tone_mapping_exposure",
    "backgroundcolor": "background_color",
    "background": "background_color",
    "bg": "background_color",
    "varnishbump": "varnish_bump",
}

# Carried by older saved configs; no longer read.
_IGNORED_KEYS = frozenset({"metalness", "roughness"})

# Fields the map synthesizer reads; any other change only affects resolution.
SYNTHESIS_FIELDS = frozenset({"metal_roughness", "paper_roughness"})


def _normalize_key(value: Any) -> str:
    return "".join(
        c
        for c in str(value).strip().lower()
        if c not in {"-", "_", " ", "."}
    )


def _check_range(label: str, value: float, lo: float, hi: float) -> None:
    if not (lo <= float(value) <= hi):
        raise ValueError(f"{label} must be within [{lo:g}, {hi:g}], got {value!r}")


def hex_to_rgba(hex_color: str, alpha: float = 1.0) -> Tuple[float, float, float, float]:
    """Convert '#rrggbb' to an RGBA tuple in 0..1."""
    if not _HEX_COLOR.match(hex_color):
        raise ValueError(f"Invalid hex color: {hex_color}")
    h = hex_color.lstrip("#")
    return (
        int(h[0:2], 16) / 255.0,
        int(h[2:4], 16) / 255.0,
        int(h[4:6], 16) / 255.0,
        float(alpha),
    )


@dataclass
class PrintConfig:
    metal_roughness: float = 0.2
    paper_roughness: float = 1.0
    ink_glossiness: float = 0.0
    exposure: float = 1.0
    tone_mapping_exposure: float = 0.9
    background_color: str = "#0d1117"
    varnish_bump: Optional[float] = 0.02

    def to_dict(self) -> dict:
        return {
            "metal_roughness": self.metal_roughness,
            "paper_roughness": self.paper_roughness,
            "ink_glossiness": self.ink_glossiness,
            "exposure": self.exposure,
            "tone_mapping_exposure": self.tone_mapping_exposure,
            "background_color": self.background_color,
            "varnish_bump": self.varnish_bump,
        }

    def copy(self) -> "PrintConfig":
        return copy.deepcopy(self)

    def validate(self) -> None:
        _check_range("metal_roughness", self.metal_roughness, 0.0, 1.0)
        _check_range("paper_roughness", self.paper_roughness, 0.0, 1.0)
        _check_range("ink_glossiness", self.ink_glossiness, 0.0, 1.0)
        _check_range("exposure", self.exposure, 0.0, 8.0)
        if self.varnish_bump is not None:
            _check_range("varnish_bump", self.varnish_bump, 0.0, 0.2)
        if float(self.tone_mapping_exposure) <= 0.0:
            raise ValueError("tone_mapping_exposure must be greater than zero")
        if not isinstance(self.background_color, str) or not _HEX_COLOR.match(self.background_color):
            raise ValueError(f"background_color must be a #rrggbb hex color, got {self.background_color!r}")

    @property
    def background_rgba(self) -> Tuple[float, float, float, float]:
        return hex_to_rgba(self.background_color)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], default: Optional["PrintConfig"] = None) -> "PrintConfig":
        base = copy.deepcopy(default) if default is not None else cls()
        for key, value in data.items():
            norm = _normalize_key(key)
            if norm in _IGNORED_KEYS:
                continue
            name = _KEY_ALIASES.get(norm)
            if name is None:
                raise ValueError(f"Unknown print config key: {key!r}")
            if name == "background_color":
                base.background_color = str(value)
            elif name == "varnish_bump":
                base.varnish_bump = None if value is None else float(value)
            else:
                setattr(base, name, float(value))
        return base

    def changed_fields(self, other: "PrintConfig") -> frozenset:
        return frozenset(
            f.name for f in fields(self) if getattr(self, f.name) != getattr(other, f.name)
        )


def _load_from_path(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in {".json", ""}:
        return json.loads(text)
    raise ValueError(f"Unsupported print config file format: {path}")


def load_config(config: ConfigSource = None, overrides: Optional[Mapping[str, Any]] = None) -> PrintConfig:
    if isinstance(config, PrintConfig):
        cfg = config.copy()
    elif isinstance(config, Mapping):
        cfg = PrintConfig.from_mapping(config)
    elif isinstance(config, (str, Path)):
        cfg = PrintConfig.from_mapping(_load_from_path(Path(config)))
    elif config is None:
        cfg = PrintConfig()
    else:
        raise TypeError("config must be PrintConfig, mapping, path, or None")

    if overrides:
        cfg = PrintConfig.from_mapping(overrides, cfg)
    cfg.validate()
    return cfg
