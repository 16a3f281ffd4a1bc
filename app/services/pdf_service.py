"""HTML to PDF rendering with headless Chromium."""

import asyncio
from collections.abc import Callable
from typing import Any

import structlog
from playwright.async_api import async_playwright

from app.config import settings
from app.core.exceptions import DocumentRenderError

logger = structlog.get_logger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


class DocumentRenderer:
    """
    Print a self-contained HTML document to a one-page A4 PDF.

    A fresh browser is launched per render and always closed again, whether
    the render succeeds, fails or runs out of time.
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        launcher: Callable[[], Any] = async_playwright,
    ):
        self.timeout_seconds = timeout_seconds or settings.pdf_render_timeout_seconds
        self.launcher = launcher

    async def render(self, html: str) -> bytes:
        """
        Render HTML to PDF bytes.

        Args:
            html: Complete HTML document

        Returns:
            PDF bytes

        Raises:
            DocumentRenderError: On browser failure, timeout or empty output
        """
        logger.info("pdf_render_started", html_length=len(html))
        try:
            pdf = await asyncio.wait_for(self._render(html), timeout=self.timeout_seconds)
        except TimeoutError as e:
            logger.error("pdf_render_failed", error="timeout", timeout=self.timeout_seconds)
            raise DocumentRenderError(
                f"PDF rendering timed out after {self.timeout_seconds}s"
            ) from e
        except DocumentRenderError:
            raise
        except Exception as e:
            logger.error("pdf_render_failed", error=str(e))
            raise DocumentRenderError(f"PDF rendering failed: {e}") from e

        if not pdf:
            logger.error("pdf_render_failed", error="empty output")
            raise DocumentRenderError("PDF rendering produced no output")

        return pdf

    async def _render(self, html: str) -> bytes:
        timeout_ms = self.timeout_seconds * 1000
        async with self.launcher() as playwright:
            browser = await playwright.chromium.launch(
                headless=True,
                args=CHROMIUM_ARGS,
                timeout=timeout_ms,
            )
            try:
                page = await browser.new_page()
                await page.set_content(html, wait_until="networkidle", timeout=timeout_ms)
                return await page.pdf(
                    format="A4",
                    print_background=True,
                    page_ranges="1",
                )
            finally:
                await browser.close()
