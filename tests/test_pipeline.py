import json

import cv2
import numpy as np
import pytest

from glyph_contrast.__main__ import main
from glyph_contrast.collectors.screenshot_loader import save_mask
from glyph_contrast.collectors.selenium_collector import SeleniumCollector
from glyph_contrast.config import AnalysisConfig
from glyph_contrast.pipeline import DetectionPipeline, InputMode, TextContrastDetector

GRAY = (128, 128, 128)
LIGHT_GRAY = (140, 140, 140)


def _low_contrast_page():
    image = np.full((30, 50, 3), GRAY, dtype=np.uint8)
    mask = np.zeros((30, 50), dtype=bool)
    image[10:15, 10:25] = LIGHT_GRAY
    mask[10:15, 10:25] = True
    return image, mask


def _encode_png(rgb_image) -> bytes:
    ok, encoded = cv2.imencode(".png", cv2.cvtColor(rgb_image, cv2.COLOR_RGB2BGR))
    assert ok
    return encoded.tobytes()


class FakeDriver:
    """Renders a fixed page whose text pixels follow injected text colors."""

    def __init__(self, image, mask):
        self.image = image
        self.mask = mask
        self.text_color = None
        self.visited = []
        self.quit_called = False

    def set_page_load_timeout(self, timeout):
        self.timeout = timeout

    def get(self, url):
        self.visited.append(url)

    def execute_script(self, script, *args):
        if "createElement" in script:
            self.text_color = args[1]
        elif ".remove()" in script:
            self.text_color = None

    def get_screenshot_as_png(self):
        image = self.image.copy()
        if self.text_color == "black":
            image[self.mask] = (0, 0, 0)
        elif self.text_color == "white":
            image[self.mask] = (255, 255, 255)
        return _encode_png(image)

    def quit(self):
        self.quit_called = True


def _write_inputs(tmp_path):
    image, mask = _low_contrast_page()
    screenshot_path = tmp_path / "page.png"
    assert cv2.imwrite(str(screenshot_path), cv2.cvtColor(image, cv2.COLOR_RGB2BGR))
    mask_path = save_mask(mask, tmp_path / "mask.png")
    return screenshot_path, mask_path, mask


def test_screenshot_mode_writes_report_and_highlight(tmp_path):
    screenshot_path, mask_path, mask = _write_inputs(tmp_path)
    output_dir = tmp_path / "out"

    result = DetectionPipeline().run(
        InputMode.SCREENSHOT, str(screenshot_path), mask_path=mask_path, output_dir=output_dir
    )

    assert len(result.layout_bugs) == 1
    assert np.array_equal(result.analysis.buggy_pixels, mask)
    assert (output_dir / "contrast_highlight.png").exists()
    report = json.loads((output_dir / "audit.json").read_text(encoding="utf-8"))
    assert report["analysis"]["buggy_pixel_count"] == int(mask.sum())
    assert report["layout_bugs"][0]["description"] == "Detected text with too low contrast."
    assert report["layout_bugs"][0]["screenshot_path"] == str(screenshot_path)
    assert report["config"]["min_readable_contrast"] == 1.5


def test_screenshot_mode_requires_mask(tmp_path):
    screenshot_path, _, _ = _write_inputs(tmp_path)
    with pytest.raises(ValueError):
        DetectionPipeline().run(InputMode.SCREENSHOT, str(screenshot_path), output_dir=tmp_path)


def test_lenient_threshold_skips_highlight(tmp_path):
    screenshot_path, mask_path, _ = _write_inputs(tmp_path)
    detector = TextContrastDetector(AnalysisConfig(min_readable_contrast=1.1))

    result = DetectionPipeline(detector=detector).run(
        InputMode.SCREENSHOT, str(screenshot_path), mask_path=mask_path, output_dir=tmp_path
    )

    assert result.layout_bugs == []
    assert not (tmp_path / "contrast_highlight.png").exists()
    assert "highlight_path" not in result.artifacts


def test_selenium_collector_derives_text_mask_from_renders(tmp_path):
    image, mask = _low_contrast_page()
    driver = FakeDriver(image, mask)
    collector = SeleniumCollector(lambda: driver, sleep_after_load=0, sleep_after_restyle=0)

    artifacts = collector.collect("https://example.test/", output_dir=tmp_path)

    assert driver.visited == ["https://example.test/"]
    assert driver.quit_called
    assert driver.text_color is None
    assert np.array_equal(artifacts.page.text_pixels, mask)
    assert np.array_equal(artifacts.page.screenshot, image)
    assert artifacts.text_mask_path.exists()


def test_url_mode_uses_collector(tmp_path):
    image, mask = _low_contrast_page()
    collector = SeleniumCollector(
        lambda: FakeDriver(image, mask), sleep_after_load=0, sleep_after_restyle=0
    )

    result = DetectionPipeline(selenium_collector=collector).run(
        InputMode.URL, "https://example.test/", output_dir=tmp_path
    )

    assert len(result.layout_bugs) == 1
    assert result.artifacts["url"] == "https://example.test/"


def test_cli_reports_layout_bug(tmp_path, capsys):
    screenshot_path, mask_path, _ = _write_inputs(tmp_path)

    exit_code = main(
        [
            "screenshot",
            str(screenshot_path),
            "--mask",
            str(mask_path),
            "--output-dir",
            str(tmp_path / "cli"),
        ]
    )

    assert exit_code == 1
    output = capsys.readouterr().out
    assert "Layout bugs: 1" in output
    assert "Detected text with too low contrast." in output


def test_cli_min_contrast_flag(tmp_path):
    screenshot_path, mask_path, _ = _write_inputs(tmp_path)

    exit_code = main(
        [
            "screenshot",
            str(screenshot_path),
            "--mask",
            str(mask_path),
            "--min-contrast",
            "1.1",
            "--output-dir",
            str(tmp_path / "cli"),
        ]
    )

    assert exit_code == 0
