# python/metalprint/errors.py
# Exception types raised by mask decoding and map synthesis.
# Exists so callers can catch every "bad input" failure as one ValueError family.
# RELEVANT FILES:python/metalprint/textures.py,python/metalprint/synthesis.py

from __future__ import annotations


class SynthesisError(ValueError):
    """Base class for map synthesis failures."""


class NoMaskError(SynthesisError):
    """Neither a white-ink mask nor a varnish mask was supplied."""


class MaskDecodeError(SynthesisError):
    """A mask or artwork source could not be turned into an RGBA8 buffer."""


class ResolutionMismatchError(SynthesisError):
    """White-ink and varnish masks do not share a resolution."""
