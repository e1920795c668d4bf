"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation and URL handling
    - Resilient actions through a ResilienceProfile (runner + policy + engine)
    - Wait strategies
    - Screenshot and debugging utilities

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

import allure
from loguru import logger
from playwright.async_api import Locator, Page

from .resilient_action import (
    ActionKind,
    ActionOutcome,
    ActionSpec,
    FallbackPolicy,
    ResilientActionRunner,
    UrlPattern,
)


# Default output directory for screenshots
SCREENSHOT_DIR = Path(__file__).parent.parent / "screenshots"

DEFAULT_BASE_URL = "https://sweetshop.netlify.app"


@dataclass
class ResilienceProfile:
    """
    Binds a runner to the fallback policy and browser engine of one test.

    Attributes:
        environment: Browser engine driving the page
        policy: Fallback strategies per engine
        runner: Runner executing the specs
        cancel_event: Once set, no further strategy starts for any action
    """

    environment: str = "chromium"
    policy: FallbackPolicy = field(default_factory=FallbackPolicy)
    runner: ResilientActionRunner = field(default_factory=ResilientActionRunner)
    cancel_event: Optional[asyncio.Event] = None

    async def run(
        self,
        spec: ActionSpec,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ActionOutcome:
        """Run `spec`; a per-call `cancel_event` takes precedence over the profile's."""
        return await self.runner.run(
            spec,
            self.policy,
            self.environment,
            cancel_event=cancel_event if cancel_event is not None else self.cancel_event,
        )


class BasePage:
    """
    Base class for all page objects.

    The Playwright page is always passed in explicitly; page objects keep no
    state besides the handle they were constructed with.

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "/login"

            async def submit(self) -> ActionOutcome:
                return await self.resilient_click(self.submit_button)
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        resilience: Optional[ResilienceProfile] = None,
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Base URL for the application
            resilience: Runner/policy/engine used for resilient actions
        """
        self.page = page
        if not base_url:
            base_url = os.getenv("UI_BASE_URL", DEFAULT_BASE_URL)
        self.base_url = base_url.rstrip("/")
        self.resilience = resilience or ResilienceProfile()

    @property
    def url(self) -> str:
        """Get full page URL."""
        return self.absolute_url(self.URL_PATH)

    @property
    def current_url(self) -> str:
        return self.page.url

    def absolute_url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def navigate(self, wait_for: str = "domcontentloaded") -> None:
        """
        Navigate to this page.

        Args:
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        with allure.step(f"Navigate to {self.URL_PATH}"):
            await self.page.goto(self.url, wait_until=wait_for)
            logger.debug(f"Navigated to: {self.url}")

    async def navigate_to(self, path: str, wait_for: str = "domcontentloaded") -> None:
        """Navigate to a specific path under the base URL."""
        full_url = self.absolute_url(path)
        with allure.step(f"Navigate to {path}"):
            await self.page.goto(full_url, wait_until=wait_for)

    async def wait_for_page_load(
        self,
        state: str = "networkidle",
        timeout: int = 15000,
    ) -> None:
        """
        Wait for the page to reach a stable load state.

        Args:
            state: Playwright load state ('load', 'domcontentloaded', 'networkidle')
            timeout: Timeout in milliseconds
        """
        await self.page.wait_for_load_state(state, timeout=timeout)

    async def is_loaded(self, timeout: int = 15000) -> bool:
        """Return True once the network is idle, False on timeout."""
        try:
            await self.wait_for_page_load(timeout=timeout)
            return True
        except Exception as e:
            logger.debug(f"Page did not settle: {e}")
            return False

    async def title(self) -> str:
        return await self.page.title()

    # =========================================================================
    # Resilient Actions
    # =========================================================================

    async def perform(
        self,
        spec: ActionSpec,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ActionOutcome:
        """Run an ActionSpec through this page's resilience profile."""
        outcome = await self.resilience.run(spec, cancel_event=cancel_event)
        if outcome.used_fallback:
            logger.info(
                f"{type(self).__name__}: '{spec.label}' needed fallback "
                f"{outcome.strategy_name}"
            )
        return outcome

    async def resilient_click(
        self,
        target: Locator,
        description: str = "",
        expect_url: Optional[UrlPattern] = None,
        navigate_to: Optional[str] = None,
        expect_visible: Optional[Locator] = None,
    ) -> ActionOutcome:
        """
        Click with the engine's fallback chain.

        Args:
            target: Locator to click
            description: Human-readable label
            expect_url: URL the click is expected to reach
            navigate_to: Path equivalent to the click's destination
            expect_visible: Element expected to appear after the click
        """
        return await self.perform(
            ActionSpec(
                target=target,
                kind=ActionKind.CLICK,
                expect_url=expect_url,
                expect_visible=expect_visible,
                navigate_to=self.absolute_url(navigate_to) if navigate_to else None,
                description=description,
            )
        )

    async def resilient_fill(
        self,
        target: Locator,
        value: str,
        description: str = "",
        allow_empty: bool = False,
    ) -> ActionOutcome:
        """Fill an input with the engine's fallback chain."""
        return await self.perform(
            ActionSpec(
                target=target,
                kind=ActionKind.FILL,
                value=value,
                require_value=not allow_empty,
                description=description,
            )
        )

    # =========================================================================
    # Wait Utilities
    # =========================================================================

    async def wait_for_url(
        self,
        url_pattern: UrlPattern,
        timeout: int = 10000,
    ) -> None:
        """
        Wait for URL to match pattern.

        Args:
            url_pattern: Glob, regex or predicate
            timeout: Timeout in milliseconds
        """
        with allure.step(f"Wait for URL: {url_pattern}"):
            await self.page.wait_for_url(url_pattern, timeout=timeout)

    async def has_text_matching(self, pattern: str, timeout: int = 2000) -> bool:
        """Return True if any visible text matches the case-insensitive regex."""
        locator = self.page.get_by_text(re.compile(pattern, re.IGNORECASE)).first
        try:
            await locator.wait_for(state="visible", timeout=timeout)
            return True
        except Exception:
            return False

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = False,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = SCREENSHOT_DIR / f"{name}_{timestamp}.png"

        await self.page.screenshot(path=str(filepath), full_page=full_page)

        if attach_to_allure:
            allure.attach.file(
                str(filepath),
                name=name,
                attachment_type=allure.attachment_type.PNG,
            )

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath


__all__ = [
    "BasePage",
    "PageBase",
    "ResilienceProfile",
]

# Alias kept for page objects that prefer PageBase naming
PageBase = BasePage
