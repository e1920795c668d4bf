"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for browser management, resilience profile and page objects.

Key Features:
- Browser engine chosen from configuration (UI_BROWSER overrides ui.browser)
- One browser context and page per test
- Fallback policy loaded once per session from config/config.yaml
- Screenshot attached to Allure on test failure

================================================================================
"""

import os
from typing import AsyncGenerator

import allure
import pytest
from loguru import logger
from playwright.async_api import Page

from sweetshop_tests.ui_testing.framework.browser_manager import BrowserManager
from sweetshop_tests.ui_testing.framework.config_loader import ConfigLoader
from sweetshop_tests.ui_testing.framework.page_base import ResilienceProfile
from sweetshop_tests.ui_testing.framework.resilient_action import (
    FallbackPolicy,
    ResilientActionRunner,
    RunnerOptions,
)
from sweetshop_tests.ui_testing.pages.basket_page import (
    BasketPage,
    PaymentDetails,
    ShippingDetails,
)
from sweetshop_tests.ui_testing.pages.home_page import HomePage
from sweetshop_tests.ui_testing.pages.login_page import LoginPage
from sweetshop_tests.ui_testing.pages.product_page import ProductPage


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report on the item so fixtures can react to failures."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


# ================================================================================
# Configuration Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def ui_config() -> ConfigLoader:
    return ConfigLoader()


@pytest.fixture(scope="session")
def base_url(ui_config: ConfigLoader) -> str:
    return ui_config.get("ui.base_url", "https://sweetshop.netlify.app").rstrip("/")


@pytest.fixture(scope="session")
def browser_name(ui_config: ConfigLoader) -> str:
    """Browser engine for this run ('chromium', 'firefox', 'webkit')."""
    return str(ui_config.get("ui.browser", "chromium")).lower()


@pytest.fixture(scope="session")
def fallback_policy(ui_config: ConfigLoader) -> FallbackPolicy:
    policy = FallbackPolicy.from_config(ui_config)
    logger.debug(f"Loaded fallback policy: {policy}")
    return policy


@pytest.fixture(scope="session")
def action_runner(ui_config: ConfigLoader) -> ResilientActionRunner:
    return ResilientActionRunner(RunnerOptions.from_config(ui_config))


@pytest.fixture
def resilience(
    browser_name: str,
    fallback_policy: FallbackPolicy,
    action_runner: ResilientActionRunner,
) -> ResilienceProfile:
    return ResilienceProfile(
        environment=browser_name,
        policy=fallback_policy,
        runner=action_runner,
    )


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture
async def browser_manager(
    ui_config: ConfigLoader,
    browser_name: str,
    base_url: str,
) -> AsyncGenerator[BrowserManager, None]:
    """
    Function-scoped browser manager.

    Launching per test keeps every Playwright object on the test's own
    event loop.
    """
    manager = BrowserManager(
        headless=ui_config.get("ui.headless", True),
        browser_type=browser_name,
        base_url=base_url,
        viewport={
            "width": ui_config.get("ui.viewport_width", 1920),
            "height": ui_config.get("ui.viewport_height", 1080),
        },
    )
    await manager.start()
    yield manager
    await manager.close()


@pytest.fixture
async def page(request, browser_manager: BrowserManager) -> AsyncGenerator[Page, None]:
    """
    Function-scoped page in a fresh context.

    Attaches a full-page screenshot to Allure when the test body failed.
    """
    page = await browser_manager.new_page()
    yield page

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed and not page.is_closed():
        try:
            screenshot = await page.screenshot(full_page=True)
            allure.attach(
                screenshot,
                name="failure_screenshot",
                attachment_type=allure.attachment_type.PNG,
            )
        except Exception as e:
            logger.warning(f"Failed to capture screenshot on failure: {e}")

    if not page.is_closed():
        await page.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def home_page(page: Page, base_url: str, resilience: ResilienceProfile) -> HomePage:
    return HomePage(page, base_url=base_url, resilience=resilience)


@pytest.fixture
def login_page(page: Page, base_url: str, resilience: ResilienceProfile) -> LoginPage:
    return LoginPage(page, base_url=base_url, resilience=resilience)


@pytest.fixture
def product_page(page: Page, base_url: str, resilience: ResilienceProfile) -> ProductPage:
    return ProductPage(page, base_url=base_url, resilience=resilience)


@pytest.fixture
def basket_page(page: Page, base_url: str, resilience: ResilienceProfile) -> BasketPage:
    return BasketPage(page, base_url=base_url, resilience=resilience)


# ================================================================================
# Test Data Fixtures
# ================================================================================

@pytest.fixture
def test_data():
    """Common test data for UI tests."""
    return {
        "valid_user": {
            "email": os.getenv("UI_EMAIL", "test@example.com"),
            "password": os.getenv("UI_PASSWORD", "password123"),
        },
        "invalid_email": "not-an-valid-email",
        "sql_injection": "' OR '1'='1",
        "special_password": '!@#$%^&*()_+{}|:"<>?`~',
        "long_input": "a" * 1000,
        "shipping": ShippingDetails(
            first_name="Jane",
            last_name="Doe",
            email="jane.doe@example.com",
            address="1 Candy Lane",
            country="United Kingdom",
            city="Bristol",
            zip_code="BS1 4DJ",
        ),
        "payment": PaymentDetails(
            card_holder="Jane Doe",
            card_number="4111111111111111",
            expiration="12/30",
            cvv="123",
        ),
    }
