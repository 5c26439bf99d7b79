# python/metalprint/__init__.py
# Public Python API for metallic-substrate print previews
# Exists to expose map synthesis, parameter resolution and the preview session in one namespace
# RELEVANT FILES: python/metalprint/synthesis.py, python/metalprint/resolver.py, python/metalprint/viewer.py, tests/test_api.py
from .config import PrintConfig, load_config
from .errors import MaskDecodeError, NoMaskError, ResolutionMismatchError, SynthesisError
from .export import SceneDescription, build_scene, export_scene_json
from .materials import PhysicalMaterial, bind_material
from .resolver import MaterialParams, PreviewMode, effective_preview_mode, resolve
from .synthesis import (
    DEFAULT_SIZE,
    VARNISH_ROUGHNESS,
    VARNISH_THRESHOLD,
    DerivedMaps,
    synthesize,
    working_size,
)
from .textures import ColorSpace, Tex, load_artwork, load_mask
from .viewer import PreviewSession

__version__ = "0.1.0"

__all__ = [
    "ColorSpace",
    "DEFAULT_SIZE",
    "DerivedMaps",
    "MaskDecodeError",
    "MaterialParams",
    "NoMaskError",
    "PhysicalMaterial",
    "PreviewMode",
    "PreviewSession",
    "PrintConfig",
    "ResolutionMismatchError",
    "SceneDescription",
    "SynthesisError",
    "Tex",
    "VARNISH_ROUGHNESS",
    "VARNISH_THRESHOLD",
    "bind_material",
    "build_scene",
    "effective_preview_mode",
    "export_scene_json",
    "load_artwork",
    "load_config",
    "load_mask",
    "resolve",
    "synthesize",
    "working_size",
]
