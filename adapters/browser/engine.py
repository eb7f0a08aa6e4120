from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from domain.errors import ExternalResourceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10000.0


def build_page_html(markup: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset='utf-8'>"
        "<style>html,body{margin:0;padding:0;background:transparent;}"
        "svg{display:block;}</style></head>"
        f"<body>{markup}</body></html>"
    )


class PlaywrightScreenshotEngine:
    """Rasterizes SVG markup with headless Chromium.

    A browser is launched per call and closed on every path, including
    failures; Playwright errors and timeouts surface as ExternalResourceError.
    """

    def __init__(
        self,
        timeout_ms: float = DEFAULT_TIMEOUT_MS,
        playwright_factory: Callable[[], Any] = sync_playwright,
        launch_args: Sequence[str] = (),
    ) -> None:
        self.timeout_ms = timeout_ms
        self.playwright_factory = playwright_factory
        self.launch_args = list(launch_args)

    def screenshot(
        self,
        markup: str,
        width: float,
        height: float,
        scale: float,
        transparent: bool,
    ) -> bytes:
        viewport = {"width": max(1, math.ceil(width)), "height": max(1, math.ceil(height))}
        try:
            with self.playwright_factory() as playwright:
                browser = None
                try:
                    browser = playwright.chromium.launch(
                        headless=True,
                        timeout=self.timeout_ms,
                        args=self.launch_args,
                    )
                    page = browser.new_page(viewport=viewport, device_scale_factor=scale)
                    page.set_default_timeout(self.timeout_ms)
                    page.set_content(build_page_html(markup), wait_until="load")
                    return page.screenshot(
                        type="png",
                        clip={"x": 0, "y": 0, "width": width, "height": height},
                        omit_background=transparent,
                    )
                finally:
                    if browser is not None:
                        browser.close()
        except PlaywrightError as exc:
            logger.warning("Browser rendering failed: %s", exc)
            msg = f"Browser rendering failed: {exc}"
            raise ExternalResourceError(msg) from exc
