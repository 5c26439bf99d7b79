# tests/conftest.py
# Shared fixtures for mask buffers and print configs.
# Also puts repo/python on sys.path so `import metalprint` works from a fresh clone.
import sys
from pathlib import Path

import numpy as np
import pytest


def _ensure_python_path():
    pkg_dir = Path(__file__).resolve().parents[1] / "python"
    if str(pkg_dir) not in sys.path:
        sys.path.insert(0, str(pkg_dir))


_ensure_python_path()

from metalprint.config import PrintConfig  # noqa: E402


def gray(values, dtype=np.uint8) -> np.ndarray:
    """Build an (H, W) grayscale mask from nested lists."""
    return np.asarray(values, dtype=dtype)


@pytest.fixture
def white_mask() -> np.ndarray:
    # left column: ink (black), right column: open metal (white)
    return gray([[0, 255], [0, 255]])


@pytest.fixture
def varnish_mask() -> np.ndarray:
    # top row varnished (black), bottom row bare
    return gray([[0, 0], [255, 255]])


@pytest.fixture
def config() -> PrintConfig:
    return PrintConfig()
