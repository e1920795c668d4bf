"""
================================================================================
Basket Page Object (Async / Playwright)
================================================================================

Basket and checkout: cart contents, promo code, delivery, shipping and
payment forms.

================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

import allure
from loguru import logger

from sweetshop_tests.ui_testing.framework.page_base import PageBase
from sweetshop_tests.ui_testing.framework.resilient_action import ActionOutcome


@dataclass(frozen=True)
class ShippingDetails:
    """Billing/shipping address form data."""

    first_name: str
    last_name: str
    email: str
    address: str
    country: str
    city: str
    zip_code: str
    address2: str = ""


@dataclass(frozen=True)
class PaymentDetails:
    """Card payment form data."""

    card_holder: str
    card_number: str
    expiration: str
    cvv: str


class BasketPage(PageBase):
    """Basket / checkout page object (async)."""

    URL_PATH = "/basket"
    PAGE_TITLE = "Basket"

    _SIDEBAR = "body > div > div > div.col-md-4.order-md-2.mb-4"

    ITEMS = "#basketItems > li:nth-child(1)"
    ITEM_NAME = "#basketItems > li:nth-child(1) > div > h6"
    ITEM_QUANTITY = "#basketItems > li:nth-child(2) > div > small"
    TOTAL = "#basketItems > li:nth-child(3) > strong"
    ITEM_COUNT = "#basketCount"

    DELETE_ITEM = "#basketItems > li:nth-child(2) > div > a"
    EMPTY_BASKET = f"{_SIDEBAR} > form > div:nth-child(2) > a"
    DELIVERY_TYPE = f"{_SIDEBAR} > div > div:nth-child(1) > label"
    PROMO_INPUT = f"{_SIDEBAR} > form > div:nth-child(1) > input"
    PROMO_REDEEM = f"{_SIDEBAR} > form > div:nth-child(1) > div:nth-child(3) > button"

    FIRST_NAME = "#name"
    LAST_NAME = "#lastName"
    EMAIL = "#email"
    ADDRESS = "#address"
    ADDRESS2 = "#address2"
    COUNTRY = "#country"
    CITY = "#city"
    ZIP = "#zip"

    CARD_HOLDER = "#cc-name"
    CARD_NUMBER = "#cc-number"
    CARD_EXPIRATION = "#cc-expiration"
    CARD_CVV = "#cc-cvv"

    CONTINUE_CHECKOUT = "body > div > div > div.col-md-8.order-md-1 > form > button"

    @property
    def items(self):
        return self.page.locator(self.ITEMS)

    @property
    def empty_basket_button(self):
        return self.page.locator(self.EMPTY_BASKET)

    @property
    def continue_button(self):
        return self.page.locator(self.CONTINUE_CHECKOUT)

    @allure.step("Open basket")
    async def open(self) -> "BasketPage":
        await self.navigate()
        return self

    async def item_count(self) -> int:
        return await self.items.count()

    async def total_text(self) -> str:
        return await self.page.locator(self.TOTAL).text_content() or "0"

    async def item_name(self) -> str:
        return await self.page.locator(self.ITEM_NAME).text_content() or ""

    async def item_quantity(self) -> str:
        return await self.page.locator(self.ITEM_QUANTITY).text_content() or ""

    async def basket_count_text(self) -> str:
        """Counter badge in the navigation bar."""
        return await self.page.locator(self.ITEM_COUNT).text_content() or "0"

    async def is_empty(self, timeout: int = 2000) -> bool:
        """The 'Empty Basket' link only renders when the basket has items."""
        try:
            await self.empty_basket_button.wait_for(state="visible", timeout=timeout)
            return False
        except Exception:
            return True

    @allure.step("Empty basket")
    async def empty_basket(self) -> None:
        await self.empty_basket_button.click()

    @allure.step("Delete item")
    async def delete_item(self) -> None:
        await self.page.locator(self.DELETE_ITEM).click()

    @allure.step("Select delivery type")
    async def select_delivery(self) -> None:
        await self.page.locator(self.DELIVERY_TYPE).click()

    @allure.step("Apply promo code: {code}")
    async def apply_promo_code(self, code: str) -> None:
        await self.page.locator(self.PROMO_INPUT).fill(code)
        await self.page.locator(self.PROMO_REDEEM).click()

    @allure.step("Fill shipping details")
    async def fill_shipping(self, details: ShippingDetails) -> None:
        await self.page.locator(self.FIRST_NAME).fill(details.first_name)
        await self.page.locator(self.LAST_NAME).fill(details.last_name)
        await self.page.locator(self.EMAIL).fill(details.email)
        await self.page.locator(self.ADDRESS).fill(details.address)
        if details.address2:
            await self.page.locator(self.ADDRESS2).fill(details.address2)
        await self.page.locator(self.COUNTRY).select_option(details.country)
        await self.page.locator(self.CITY).select_option(details.city)
        await self.page.locator(self.ZIP).fill(details.zip_code)

    @allure.step("Fill payment details")
    async def fill_payment(self, details: PaymentDetails) -> None:
        await self.page.locator(self.CARD_HOLDER).fill(details.card_holder)
        await self.page.locator(self.CARD_NUMBER).fill(details.card_number)
        await self.page.locator(self.CARD_EXPIRATION).fill(details.expiration)
        await self.page.locator(self.CARD_CVV).fill(details.cvv)

    @allure.step("Continue to checkout")
    async def proceed_checkout(self) -> ActionOutcome:
        """Submit the checkout form; a terminal click like the login submit."""
        outcome = await self.resilient_click(
            self.continue_button, description="checkout: continue"
        )
        logger.info(f"Checkout submitted: {outcome.status.value}")
        return outcome
