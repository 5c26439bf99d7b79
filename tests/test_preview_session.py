# tests/test_preview_session.py
# Tests for the headless interactive preview session.
# Exists to ensure maps regenerate only when needed and mode gating follows mask availability.
# RELEVANT FILES:python/metalprint/viewer.py,python/metalprint/synthesis.py,python/metalprint/resolver.py

import logging

import numpy as np
import pytest

from metalprint.errors import MaskDecodeError, ResolutionMismatchError
from metalprint.resolver import PreviewMode
from metalprint.viewer import DEFAULT_ASPECT_RATIO, PreviewSession


def test_fresh_session_is_plain_paper():
    session = PreviewSession()
    assert session.maps is None
    assert session.preview_mode is PreviewMode.PAPER
    assert session.aspect_ratio == pytest.approx(DEFAULT_ASPECT_RATIO)
    params = session.params()
    assert not params.use_metalness_map
    assert params.roughness == pytest.approx(1.0)


def test_white_mask_enables_metal(white_mask):
    session = PreviewSession()
    session.set_white_mask(white_mask)
    assert session.preview_mode is PreviewMode.METAL
    assert session.maps is not None
    assert not session.has_varnish
    mat = session.material()
    assert mat.metalness_map is session.maps.metalness
    assert mat.metalness == 1.0


def test_clearing_white_mask_forces_paper(white_mask, varnish_mask):
    session = PreviewSession()
    session.set_white_mask(white_mask)
    session.set_varnish_mask(varnish_mask)
    session.set_white_mask(None)
    assert session.preview_mode is PreviewMode.PAPER
    assert session.has_varnish
    # varnish on paper still binds the maps but zeroes metal
    params = session.params()
    assert params.use_metalness_map
    assert params.metalness == 0.0
    assert np.all(session.maps.metalness.data[..., 0] == 0)


def test_clearing_all_masks_clears_maps(white_mask):
    session = PreviewSession()
    session.set_white_mask(white_mask)
    session.set_white_mask(None)
    assert session.maps is None


def test_requested_mode_is_remembered(white_mask):
    session = PreviewSession(preview_mode="paper")
    session.set_white_mask(white_mask)
    assert session.preview_mode is PreviewMode.PAPER
    assert session.set_preview_mode("metal") is PreviewMode.METAL


def test_only_roughness_changes_resynthesize(white_mask):
    session = PreviewSession()
    session.set_white_mask(white_mask)
    assert session.synthesis_count == 1

    session.update_config(exposure=2.0, inkGlossiness=0.5)
    assert session.synthesis_count == 1
    assert session.params().clearcoat == pytest.approx(0.5)
    assert session.params().env_intensity == pytest.approx(2.0)

    before = session.maps.roughness.data.copy()
    session.update_config(metalRoughness=0.6)
    assert session.synthesis_count == 2
    assert not np.array_equal(before, session.maps.roughness.data)
    assert session.config.metal_roughness == pytest.approx(0.6)


def test_invalid_config_update_keeps_state(white_mask):
    session = PreviewSession()
    session.set_white_mask(white_mask)
    with pytest.raises(ValueError, match="exposure"):
        session.update_config(exposure=9.0)
    assert session.config.exposure == pytest.approx(1.0)


def test_failed_mask_update_keeps_previous_state(white_mask, caplog):
    session = PreviewSession()
    session.set_white_mask(white_mask)
    maps = session.maps

    with pytest.raises(ResolutionMismatchError):
        session.set_varnish_mask(np.zeros((3, 3), dtype=np.uint8))
    assert "Failed to process textures" in caplog.text
    assert session.maps is maps
    assert not session.has_varnish

    with pytest.raises(MaskDecodeError):
        session.set_white_mask(np.zeros((2, 2), dtype=np.int16))
    assert session.has_white_mask


def test_aspect_ratio_follows_artwork():
    session = PreviewSession()
    session.set_artwork(np.zeros((10, 30, 3), dtype=np.uint8))
    assert session.aspect_ratio == pytest.approx(3.0)


def test_export_requires_artwork():
    with pytest.raises(RuntimeError, match="artwork"):
        PreviewSession().export_scene()


def test_export_uses_session_state(white_mask, varnish_mask):
    session = PreviewSession({"exposure": 4.0})
    session.set_artwork(np.zeros((2, 2, 3), dtype=np.uint8))
    session.set_white_mask(white_mask)
    session.set_varnish_mask(varnish_mask)
    session.set_preview_mode(PreviewMode.PAPER)

    scene = session.export_scene()
    assert scene.preview_mode is PreviewMode.PAPER
    assert scene.params == session.params()
    assert scene.params.env_intensity == pytest.approx(0.8)
    assert "clearcoat" in scene.textures


def test_resynthesis_does_not_decode_masks_again(caplog):
    colored = np.zeros((2, 2, 3), dtype=np.uint8)
    colored[..., 1] = 40
    session = PreviewSession()
    with caplog.at_level(logging.WARNING, logger="metalprint.textures"):
        session.set_white_mask(colored)
        session.update_config(metalRoughness=0.5)
        session.set_varnish_mask(np.zeros((2, 2), dtype=np.uint8))
    assert session.synthesis_count == 3
    assert caplog.text.count("not grayscale") == 1
