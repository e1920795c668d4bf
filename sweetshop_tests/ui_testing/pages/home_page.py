"""
================================================================================
Home Page Object (Async / Playwright)
================================================================================

Landing page of the Sweet Shop: navigation bar, product grid and search.

Navigation-triggering clicks (login, basket, product cards) go through the
resilient runner so engine-specific click quirks are handled by policy.

================================================================================
"""

from __future__ import annotations

import re
from typing import List

import allure
from loguru import logger

from sweetshop_tests.ui_testing.framework.page_base import PageBase
from sweetshop_tests.ui_testing.framework.resilient_action import ActionOutcome


LOGIN_URL = re.compile(r"/login")
BASKET_URL = re.compile(r"/basket", re.IGNORECASE)


class HomePage(PageBase):
    """Sweet Shop home page object (async)."""

    URL_PATH = "/"
    PAGE_TITLE = "Sweet Shop"

    # Navigation bar
    NAV_ABOUT = "#navbarColor01 > ul > li:nth-child(2) > a"
    NAV_LOGIN = "#navbarColor01 > ul > li:nth-child(3) > a"
    NAV_BASKET = "#navbarColor01 > ul > li:nth-child(4) > a"
    NAV_HOME = "body > nav > div > a"
    LOGO = "body > div > header > div > img"

    # Product grid
    PRODUCT_CARDS = "div.row.text-center > div.col-lg-3"
    FIRST_ADD_TO_BASKET = (
        "body > div > div.row.text-center > div:nth-child(1) > div > div.card-footer > a"
    )

    # Search
    BROWSE_BUTTON = "body > div > header > a"
    SEARCH_INPUT = "#search-input-id"

    @property
    def about_link(self):
        return self.page.locator(self.NAV_ABOUT)

    @property
    def login_link(self):
        return self.page.locator(self.NAV_LOGIN)

    @property
    def basket_link(self):
        return self.page.locator(self.NAV_BASKET)

    @property
    def home_link(self):
        return self.page.locator(self.NAV_HOME)

    @property
    def logo(self):
        return self.page.locator(self.LOGO)

    @property
    def product_cards(self):
        return self.page.locator(self.PRODUCT_CARDS)

    @property
    def add_to_basket_button(self):
        return self.page.locator(self.FIRST_ADD_TO_BASKET)

    @allure.step("Open home page")
    async def open(self) -> "HomePage":
        """Navigate to the home page."""
        await self.navigate()
        return self

    @allure.step("Go to login page")
    async def go_to_login(self) -> ActionOutcome:
        """Click the Login nav link; expects a /login URL."""
        await self.login_link.wait_for(state="visible", timeout=5000)
        return await self.resilient_click(
            self.login_link,
            description="nav: Login",
            expect_url=LOGIN_URL,
            navigate_to="/login",
        )

    @allure.step("Go to basket")
    async def go_to_basket(self) -> ActionOutcome:
        """Click the Basket nav link; expects a /basket URL."""
        return await self.resilient_click(
            self.basket_link,
            description="nav: Basket",
            expect_url=BASKET_URL,
            navigate_to="/basket",
        )

    @allure.step("Open product #{index}")
    async def open_product(self, index: int = 0) -> ActionOutcome:
        """Click a product card in the grid."""
        return await self.resilient_click(
            self.product_cards.nth(index),
            description=f"product card #{index}",
        )

    @allure.step("Add first product to basket")
    async def add_first_product_to_basket(self) -> ActionOutcome:
        return await self.resilient_click(
            self.add_to_basket_button,
            description="first product: Add to Basket",
        )

    @allure.step("Search product: {product_name}")
    async def search_product(self, product_name: str) -> bool:
        """
        Search for a product and add the first match to the basket.

        Returns:
            False when the search field is not present on the page
        """
        search_input = self.page.locator(self.SEARCH_INPUT)
        if not await search_input.is_visible():
            logger.info("Search field not available on home page")
            return False

        await search_input.fill(product_name)
        await self.page.locator(self.BROWSE_BUTTON).click()
        await self.add_to_basket_button.click()
        return True

    async def product_count(self) -> int:
        return await self.product_cards.count()

    async def product_names(self) -> List[str]:
        """Text content of every product card in the grid."""
        names = []
        for card in await self.product_cards.all():
            text = await card.text_content()
            if text:
                names.append(text.strip())
        return names

    @allure.step("Navigate to category: {category}")
    async def navigate_to_category(self, category: str) -> None:
        await self.page.locator(f"nav >> text={category}").click()
