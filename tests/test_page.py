import numpy as np
import pytest

from glyph_contrast.config import AnalysisConfig
from glyph_contrast.errors import ConfigurationError, ContractViolation
from glyph_contrast.page import PageSnapshot


def test_mismatched_dimensions_fail_fast():
    screenshot = np.zeros((10, 20, 3), dtype=np.uint8)
    mask = np.zeros((10, 19), dtype=bool)
    with pytest.raises(ContractViolation, match="19x10"):
        PageSnapshot.from_arrays(screenshot, mask)


def test_zero_area_is_rejected():
    with pytest.raises(ContractViolation):
        PageSnapshot.from_arrays(np.zeros((0, 5, 3), dtype=np.uint8), np.zeros((0, 5), dtype=bool))


@pytest.mark.parametrize(
    "screenshot, mask",
    [
        (np.zeros((4, 4), dtype=np.uint8), np.zeros((4, 4), dtype=bool)),
        (np.zeros((4, 4, 4), dtype=np.uint8), np.zeros((4, 4), dtype=bool)),
        (np.zeros((4, 4, 3), dtype=np.uint8), np.zeros((4, 4, 1), dtype=bool)),
        (np.full((4, 4, 3), 0.5), np.zeros((4, 4), dtype=bool)),
        (np.full((4, 4, 3), 300, dtype=np.int32), np.zeros((4, 4), dtype=bool)),
    ],
)
def test_malformed_grids_are_rejected(screenshot, mask):
    with pytest.raises(ContractViolation):
        PageSnapshot.from_arrays(screenshot, mask)


def test_snapshot_is_read_only_and_normalized():
    screenshot = np.full((3, 5, 3), 7, dtype=np.int64)
    mask = np.zeros((3, 5), dtype=np.uint8)
    mask[1, 2] = 255

    page = PageSnapshot.from_arrays(screenshot, mask, path="page.png")

    assert (page.width, page.height) == (5, 3)
    assert page.screenshot.dtype == np.uint8
    assert page.text_pixels.dtype == bool
    assert page.text_pixels[1, 2]
    assert str(page.path) == "page.png"
    with pytest.raises(ValueError):
        page.text_pixels[0, 0] = True
    # The caller's array is not frozen.
    screenshot[0, 0] = 1


def test_config_defaults():
    config = AnalysisConfig()
    assert config.min_readable_contrast == 1.5
    assert config.min_blob_width == 4
    assert config.run_threshold == 10


@pytest.mark.parametrize(
    "kwargs",
    [{"min_readable_contrast": 0.9}, {"min_blob_width": 0}, {"run_threshold": 0}],
)
def test_config_rejects_out_of_range_values(kwargs):
    with pytest.raises(ConfigurationError):
        AnalysisConfig(**kwargs)


def test_config_reads_environment_and_overrides(monkeypatch):
    monkeypatch.setenv("GLYPH_CONTRAST_MIN_READABLE_CONTRAST", "3.0")
    monkeypatch.setenv("GLYPH_CONTRAST_RUN_THRESHOLD", "6")
    monkeypatch.delenv("GLYPH_CONTRAST_MIN_BLOB_WIDTH", raising=False)

    config = AnalysisConfig.from_env(min_blob_width=None, run_threshold=8)

    assert config.min_readable_contrast == 3.0
    assert config.min_blob_width == 4
    assert config.run_threshold == 8


def test_config_rejects_unparseable_environment(monkeypatch):
    monkeypatch.setenv("GLYPH_CONTRAST_MIN_BLOB_WIDTH", "wide")
    with pytest.raises(ConfigurationError, match="GLYPH_CONTRAST_MIN_BLOB_WIDTH"):
        AnalysisConfig.from_env()
