"""
================================================================================
Product Page Object (Async / Playwright)
================================================================================

Product detail view: title, price, image, quantity controls, add to basket.

================================================================================
"""

from __future__ import annotations

import allure

from sweetshop_tests.ui_testing.framework.page_base import PageBase


class ProductPage(PageBase):
    """Single sweet / product detail page object (async)."""

    URL_PATH = "/sweets"
    PAGE_TITLE = "Sweets"

    TITLE = ".card-body h4"
    PRICE = ".card-body .text-muted, .card-body small"
    DESCRIPTION = ".card-text"
    IMAGE = ".card img"
    ADD_TO_BASKET = "button.addItem, a.addItem"
    QUANTITY_INPUT = 'input[type="number"], input[name*="quantity"]'
    BACK_BUTTON = 'role=button[name=/back/i], a:has-text("Back")'

    @property
    def add_to_basket_button(self):
        return self.page.locator(self.ADD_TO_BASKET).first

    @property
    def quantity_input(self):
        return self.page.locator(self.QUANTITY_INPUT)

    @property
    def increase_button(self):
        return self.page.locator("button", has_text="+")

    @property
    def decrease_button(self):
        return self.page.locator("button", has_text="-")

    @property
    def image(self):
        return self.page.locator(self.IMAGE).first

    async def title_text(self) -> str:
        text = await self.page.locator(self.TITLE).first.text_content()
        return (text or "").strip()

    async def price_text(self) -> str:
        text = await self.page.locator(self.PRICE).first.text_content()
        return (text or "").strip()

    async def description_text(self) -> str:
        text = await self.page.locator(self.DESCRIPTION).first.text_content()
        return (text or "").strip()

    @allure.step("Add product to basket")
    async def add_to_basket(self) -> None:
        await self.add_to_basket_button.wait_for(state="visible")
        await self.add_to_basket_button.click()

    @allure.step("Set quantity: {quantity}")
    async def set_quantity(self, quantity: int) -> None:
        await self.quantity_input.fill(str(quantity))

    async def quantity(self) -> int:
        """Current quantity; an empty or non-numeric field reads as 1, zero stays zero."""
        raw = (await self.quantity_input.input_value()).strip()
        try:
            return int(raw)
        except ValueError:
            return 1

    @allure.step("Adjust quantity: {direction} x{times}")
    async def adjust_quantity(self, times: int = 1, direction: str = "increase") -> None:
        if direction not in ("increase", "decrease"):
            raise ValueError(f"Unknown direction: {direction}")
        button = self.increase_button if direction == "increase" else self.decrease_button
        for _ in range(times):
            await button.click()

    async def is_add_to_basket_enabled(self) -> bool:
        return await self.add_to_basket_button.is_enabled()

    async def is_image_loaded(self) -> bool:
        """True when the product image is visible and fully decoded."""
        if not await self.image.is_visible():
            return False
        return await self.image.evaluate("img => img.complete && img.naturalWidth > 0")

    @allure.step("Go back")
    async def go_back(self) -> None:
        await self.page.locator(self.BACK_BUTTON).click()
