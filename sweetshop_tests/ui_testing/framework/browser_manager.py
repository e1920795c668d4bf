"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - Engine selection (chromium, firefox, webkit)
    - Context isolation per test
    - Base URL bound to each context so page objects navigate by path

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Manages a browser instance and its contexts for UI testing.

    Usage:
        async with BrowserManager(browser_type="firefox", base_url=url) as manager:
            page = await manager.new_page()
            await page.goto("/")
    """

    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
    }

    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        base_url: str = "",
        viewport: Optional[Dict[str, int]] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode
            browser_type: Browser to use - 'chromium', 'firefox', 'webkit'
            base_url: Base URL for relative navigation in new contexts
            viewport: Viewport size override
        """
        browser_type = browser_type.lower()
        if browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser: {browser_type} (expected one of {SUPPORTED_BROWSERS})"
            )

        self.headless = headless
        self.browser_type = browser_type
        self.base_url = base_url.rstrip("/")
        self.viewport = viewport

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: list[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()
        browser_launcher = getattr(self._playwright, self.browser_type)

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }

        self._browser = await browser_launcher.launch(**launch_options)
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except Exception as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new isolated browser context.

        Args:
            **options: Additional context options

        Returns:
            New BrowserContext
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        if self.viewport and "viewport" not in options:
            context_options["viewport"] = self.viewport
        if self.base_url:
            context_options.setdefault("base_url", self.base_url)

        context = await self._browser.new_context(**context_options)
        self._contexts.append(context)

        return context

    async def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """
        Create new page in new or existing context.

        Args:
            context: Existing context to use (creates new if None)
            **context_options: Options for new context

        Returns:
            New Page
        """
        if context is None:
            context = await self.new_context(**context_options)

        return await context.new_page()

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
