"""
Stub Playwright pages/locators for framework tests that run without a browser.

The stubs implement just the primitives the runner and page objects call
(`click`, `fill`, `clear`, `evaluate`, `wait_for`, `wait_for_url`, `goto`,
`is_closed`, `locator`) and record every call for assertions.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from sweetshop_tests.ui_testing.framework.resilient_action import url_matches


BASE_URL = "https://sweetshop.netlify.app"


class FakePage:
    """Minimal async Page double with a mutable URL."""

    def __init__(self, url: str = f"{BASE_URL}/"):
        self.url = url
        self.closed = False
        self.goto_calls: List[str] = []
        self.goto_error: Optional[BaseException] = None
        self._locators: Dict[str, "FakeLocator"] = {}

    def is_closed(self) -> bool:
        return self.closed

    def locator(self, selector: str) -> "FakeLocator":
        if selector not in self._locators:
            self._locators[selector] = FakeLocator(self, selector)
        return self._locators[selector]

    async def wait_for_url(self, pattern: Any, timeout: Optional[int] = None) -> None:
        # Yield a few times so a concurrently running click can change the URL
        for _ in range(5):
            if url_matches(self.url, pattern, base_url=BASE_URL):
                return
            await asyncio.sleep(0)
        raise PlaywrightTimeoutError(
            f"Timeout {timeout}ms exceeded waiting for URL {pattern!r}"
        )

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self.goto_calls.append(url)
        if self.goto_error is not None:
            raise self.goto_error
        self.url = url


class FakeLocator:
    """
    Async Locator double.

    Attributes:
        errors: method name -> exception to raise. Forced interactions are keyed
            as "force_click", "force_fill", "force_clear".
        navigates_to: URL the page moves to when a click succeeds
        visible: result of `wait_for(state="visible")`
    """

    def __init__(self, page: FakePage, selector: str = "#target"):
        self.page = page
        self.selector = selector
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.errors: Dict[str, BaseException] = {}
        self.navigates_to: Optional[str] = None
        self.visible = True
        self.value = ""

    def __repr__(self) -> str:
        return f"<FakeLocator {self.selector}>"

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        error = self.errors.get(name)
        if error is not None:
            raise error

    def called(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    @property
    def first(self) -> "FakeLocator":
        return self

    def nth(self, index: int) -> "FakeLocator":
        return self

    async def click(self, timeout: Optional[int] = None, force: bool = False) -> None:
        self._record("force_click" if force else "click", timeout=timeout)
        if self.navigates_to:
            self.page.url = self.navigates_to

    async def fill(self, value: str, timeout: Optional[int] = None, force: bool = False) -> None:
        self._record("force_fill" if force else "fill", value=value, timeout=timeout)
        self.value = value

    async def clear(self, timeout: Optional[int] = None, force: bool = False) -> None:
        self._record("force_clear" if force else "clear", timeout=timeout)
        self.value = ""

    async def input_value(self, timeout: Optional[int] = None) -> str:
        self._record("input_value", timeout=timeout)
        return self.value

    async def evaluate(self, expression: str, arg: Any = None, timeout: Optional[int] = None) -> None:
        self._record("evaluate", expression=expression, arg=arg, timeout=timeout)
        if "click()" in expression and self.navigates_to:
            self.page.url = self.navigates_to
        elif arg is not None:
            self.value = arg

    async def wait_for(self, state: str = "visible", timeout: Optional[int] = None) -> None:
        self._record("wait_for", state=state, timeout=timeout)
        if state == "visible" and not self.visible:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")


class CountingStrategy:
    """Fallback strategy double that counts invocations."""

    def __init__(self, name: str, error: Optional[BaseException] = None, on_call=None):
        self.strategy_name = name
        self.error = error
        self.on_call = on_call
        self.calls = 0

    async def __call__(self, spec: Any, timeout: int) -> None:
        self.calls += 1
        if self.on_call is not None:
            self.on_call()
        if self.error is not None:
            raise self.error


class DummyConfig:
    def __init__(self, data):
        self.data = data

    def get(self, key, default=None):
        return self.data.get(key, default)


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def target(fake_page: FakePage) -> FakeLocator:
    return fake_page.locator("#target")


@pytest.fixture
def make_strategy():
    return CountingStrategy


@pytest.fixture
def make_config():
    return DummyConfig


@pytest.fixture
def timeout_error():
    def factory(message: str = "Timeout 100ms exceeded.") -> PlaywrightTimeoutError:
        return PlaywrightTimeoutError(message)
    return factory
