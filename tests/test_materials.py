# tests/test_materials.py
# Tests for binding resolved parameters and derived maps into a physical material.
# Exists to ensure only the maps the resolver selects are attached, with the right tags.
# RELEVANT FILES:python/metalprint/materials.py,python/metalprint/resolver.py

import numpy as np
import pytest

from metalprint.config import PrintConfig
from metalprint.materials import CLEARCOAT_ROUGHNESS, REFLECTIVITY, PhysicalMaterial, bind_material
from metalprint.resolver import PreviewMode, resolve
from metalprint.synthesis import synthesize
from metalprint.textures import load_artwork, load_mask


@pytest.fixture
def maps(white_mask, varnish_mask):
    return synthesize(white_mask, varnish_mask, 0.2, 1.0)


@pytest.fixture
def artwork():
    return load_artwork(np.zeros((2, 2, 3), dtype=np.uint8))


def test_default_material():
    mat = PhysicalMaterial()
    assert mat.clearcoat_roughness == CLEARCOAT_ROUGHNESS == 0.1
    assert mat.reflectivity == REFLECTIVITY == 0.5
    assert mat.metalness_map is None


def test_varnish_paper_binds_all_maps(maps, artwork, config):
    mat = bind_material(resolve(True, PreviewMode.PAPER, config), maps, artwork)
    assert mat.base_color is artwork
    assert mat.metalness_map is maps.metalness
    assert mat.roughness_map is maps.roughness
    assert mat.clearcoat_map is maps.clearcoat
    assert mat.bump_map is maps.clearcoat
    assert mat.metalness == 0.0
    assert mat.clearcoat == 1.0
    assert mat.bump_scale == pytest.approx(config.varnish_bump)


def test_plain_paper_binds_nothing(white_mask, artwork):
    maps = synthesize(white_mask, None, 0.2, 1.0)
    cfg = PrintConfig(paper_roughness=0.6)
    mat = bind_material(resolve(False, PreviewMode.PAPER, cfg), maps, artwork)
    assert mat.metalness_map is None
    assert mat.roughness_map is None
    assert mat.clearcoat_map is None
    assert mat.bump_map is None
    assert mat.roughness == pytest.approx(0.6)
    assert mat.env_intensity == pytest.approx(0.2)


def test_metal_without_varnish(white_mask, artwork):
    maps = synthesize(white_mask, None, 0.2, 1.0)
    cfg = PrintConfig(ink_glossiness=0.4, exposure=1.5)
    mat = bind_material(resolve(False, PreviewMode.METAL, cfg), maps, artwork)
    assert mat.metalness_map is maps.metalness
    assert mat.clearcoat_map is None
    assert mat.metalness == 1.0
    assert mat.roughness == 1.0
    assert mat.clearcoat == pytest.approx(0.4)
    assert mat.bump_scale == 0.0
    assert mat.env_intensity == pytest.approx(1.5)


def test_missing_maps_leave_slots_empty(config):
    mat = bind_material(resolve(True, PreviewMode.METAL, config), None)
    assert mat.metalness_map is None
    assert mat.bump_scale == 0.0
    assert mat.metalness == 1.0


def test_color_space_tags_enforced(maps, config):
    not_artwork = load_mask(np.zeros((2, 2), dtype=np.uint8))
    with pytest.raises(ValueError, match="artwork must be tagged perceptual"):
        bind_material(resolve(True, PreviewMode.METAL, config), maps, not_artwork)
