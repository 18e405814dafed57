"""Captures a page screenshot and its text-pixel mask via Selenium."""
from __future__ import annotations

import os
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

import numpy as np
import structlog

try:
    from selenium import webdriver
    from selenium.webdriver.chrome.service import Service as ChromeService  # type: ignore[import]
except ImportError:  # pragma: no cover - optional dependency
    webdriver = None
    ChromeService = None

try:  # pragma: no cover - optional dependency
    from webdriver_manager.chrome import ChromeDriverManager  # type: ignore[import]
except ImportError:  # pragma: no cover
    ChromeDriverManager = None

from ..page import PageSnapshot
from .screenshot_loader import ScreenshotArtifacts, ScreenshotLoader, save_mask
from .text_pixels import text_pixels_from_renders

logger = structlog.get_logger(__name__)

TEXT_COLOR_STYLE_ID = "glyph-contrast-text-color"

# Forces one color onto every text node and hides caret and selection so that
# only glyph pixels differ between the two renders.
_COLOR_ALL_TEXT_SCRIPT = """
const [styleId, color] = arguments;
let style = document.getElementById(styleId);
if (!style) {
    style = document.createElement('style');
    style.id = styleId;
    document.head.appendChild(style);
}
style.textContent = '* { color: ' + color + ' !important; caret-color: transparent !important; '
    + 'text-shadow: none !important; } ::selection { background: transparent !important; }';
"""

_RESTORE_TEXT_COLORS_SCRIPT = """
const style = document.getElementById(arguments[0]);
if (style) { style.remove(); }
"""


class DriverFactory(Protocol):
    def __call__(self) -> Any:
        ...


@dataclass(frozen=True)
class SeleniumArtifacts:
    """Artifacts captured from a live URL."""

    url: str
    screenshot: ScreenshotArtifacts
    text_mask_path: Path
    page: PageSnapshot


class SeleniumCollector:
    """Renders a URL three times: unmodified, with black text and with white text.

    The unmodified render is the screenshot under analysis; the pixels that
    differ between the black and white renders form the text mask.
    """

    def __init__(
        self,
        driver_factory: Optional[DriverFactory] = None,
        *,
        sleep_after_load: float = 2.0,
        sleep_after_restyle: float = 0.2,
        timeout: int = 30,
    ) -> None:
        self.driver_factory = driver_factory or self._default_driver_factory
        self.sleep_after_load = sleep_after_load
        self.sleep_after_restyle = sleep_after_restyle
        self.timeout = timeout
        self.screenshot_loader = ScreenshotLoader()

    def collect(self, url: str, *, output_dir: Path) -> SeleniumArtifacts:
        if webdriver is None and self.driver_factory == self._default_driver_factory:
            raise RuntimeError(
                "Selenium is not available. Install selenium and configure a WebDriver."
            )

        output_dir.mkdir(parents=True, exist_ok=True)
        screenshot_path = output_dir / "screenshot.png"
        mask_path = output_dir / "text_pixels.png"

        driver = self.driver_factory()
        try:
            driver.set_page_load_timeout(self.timeout)
            driver.get(url)
            time.sleep(self.sleep_after_load)
            logger.info("page_loaded", url=url)

            screenshot = self.screenshot_loader.load_from_bytes(
                driver.get_screenshot_as_png(), output_path=screenshot_path
            )
            black_text = self._capture_with_text_color(driver, "black", output_dir)
            white_text = self._capture_with_text_color(driver, "white", output_dir)
            driver.execute_script(_RESTORE_TEXT_COLORS_SCRIPT, TEXT_COLOR_STYLE_ID)
        finally:
            driver.quit()

        text_pixels = text_pixels_from_renders(black_text, white_text)
        save_mask(text_pixels, mask_path)
        logger.info(
            "text_pixels_captured",
            url=url,
            text_pixel_count=int(np.count_nonzero(text_pixels)),
        )
        page = PageSnapshot.from_arrays(screenshot.image, text_pixels, path=screenshot.path)
        return SeleniumArtifacts(
            url=url,
            screenshot=screenshot,
            text_mask_path=mask_path,
            page=page,
        )

    def _capture_with_text_color(self, driver: Any, color: str, output_dir: Path) -> np.ndarray:
        driver.execute_script(_COLOR_ALL_TEXT_SCRIPT, TEXT_COLOR_STYLE_ID, color)
        time.sleep(self.sleep_after_restyle)
        artifacts = self.screenshot_loader.load_from_bytes(
            driver.get_screenshot_as_png(), output_path=output_dir / f"screenshot_text_{color}.png"
        )
        return artifacts.image

    def _default_driver_factory(self) -> Any:
        if webdriver is None:
            raise RuntimeError("Selenium is not installed.")

        options = webdriver.ChromeOptions()
        # Headless + sandbox-safe defaults for CI environments.
        options.add_argument("--headless=new")
        options.add_argument("--disable-gpu")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        # Font smoothing must not depend on text color or the mask picks up noise.
        options.add_argument("--disable-lcd-text")
        options.add_argument("--force-device-scale-factor=1")
        options.add_argument("--window-size=1280,1024")

        binary = self._resolve_chrome_binary()
        if binary:
            options.binary_location = binary

        service = None
        driver_path = self._resolve_chromedriver_path()
        if driver_path and ChromeService is not None:
            service = ChromeService(driver_path)

        try:
            if service is not None:
                return webdriver.Chrome(service=service, options=options)
            return webdriver.Chrome(options=options)
        except Exception as exc:  # pragma: no cover - propagate meaningful error
            guidance = (
                "Failed to initialize ChromeDriver. Verify Google Chrome is installed or "
                "set CHROME_BINARY and CHROMEDRIVER_PATH environment variables."
            )
            raise RuntimeError(guidance) from exc

    def _resolve_chrome_binary(self) -> Optional[str]:
        explicit = os.getenv("CHROME_BINARY")
        if explicit and Path(explicit).exists():
            return explicit

        candidates = [
            shutil.which("google-chrome"),
            shutil.which("google-chrome-stable"),
            shutil.which("chromium"),
            shutil.which("chrome"),
            "/opt/google/chrome/chrome",
        ]
        for candidate in candidates:
            if candidate and Path(candidate).exists():
                return str(candidate)
        return None

    def _resolve_chromedriver_path(self) -> Optional[str]:
        explicit = os.getenv("CHROMEDRIVER_PATH")
        if explicit and Path(explicit).exists():
            return explicit

        system_driver = shutil.which("chromedriver")
        if system_driver:
            return system_driver

        if ChromeDriverManager is not None:
            try:
                return ChromeDriverManager().install()
            except Exception as exc:
                logger.warning("chromedriver_download_failed", error=str(exc))
                return None
        return None
