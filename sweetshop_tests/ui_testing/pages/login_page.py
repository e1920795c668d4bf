"""
================================================================================
Login Page Object (Async / Playwright)
================================================================================

Login form of the Sweet Shop demo site.

Form submission is a terminal click: on engines with a fallback policy it may
degrade to a forced or DOM-level click, and a page that closes under the click
yields a soft failure instead of an exception.

NOTE:
  The demo site performs no real authentication; tests validate form
  behaviour only.

================================================================================
"""

from __future__ import annotations

import allure

from sweetshop_tests.ui_testing.framework.page_base import PageBase
from sweetshop_tests.ui_testing.framework.resilient_action import (
    ActionKind,
    ActionOutcome,
    ActionSpec,
)


class LoginPage(PageBase):
    """Login page object (async)."""

    URL_PATH = "/login"
    PAGE_TITLE = "Login"

    EMAIL_INPUT = "#exampleInputEmail"
    PASSWORD_INPUT = "#exampleInputPassword"
    SUBMIT_BUTTON = 'button:has-text("Login"), button[type="submit"]'
    SOCIAL_LOGIN = "body > div > div > div > div > a:nth-child({n}) > img"
    MOBILE_MENU = "body > nav > div > button > span"

    ERROR_TEXT = r"error|crash|failed"

    @property
    def email_input(self):
        return self.page.locator(self.EMAIL_INPUT)

    @property
    def password_input(self):
        return self.page.locator(self.PASSWORD_INPUT)

    @property
    def submit_button(self):
        return self.page.locator(self.SUBMIT_BUTTON).first

    @property
    def menu_button(self):
        return self.page.locator(self.MOBILE_MENU)

    def social_login_button(self, number: int):
        """Alternative login option 1-3 (defaults to 1 for unknown numbers)."""
        if number not in (1, 2, 3):
            number = 1
        return self.page.locator(self.SOCIAL_LOGIN.format(n=number))

    @allure.step("Open login page")
    async def open(self) -> "LoginPage":
        await self.navigate()
        return self

    async def is_form_visible(self, timeout: int = 5000) -> bool:
        """Return True when the email field becomes visible within `timeout`."""
        try:
            await self.email_input.wait_for(state="visible", timeout=timeout)
            return True
        except Exception:
            return False

    @allure.step("Fill login form (email={email})")
    async def fill_form(self, email: str, password: str) -> None:
        await self.email_input.fill(email)
        await self.password_input.fill(password)

    @allure.step("Submit login form")
    async def submit(self) -> ActionOutcome:
        """Click the Login button through the resilient runner."""
        return await self.resilient_click(self.submit_button, description="login: submit")

    @allure.step("Login (email={email})")
    async def login(self, email: str, password: str) -> ActionOutcome:
        await self.fill_form(email, password)
        return await self.submit()

    @allure.step("Clear login form")
    async def clear_form(self) -> None:
        """Clear both fields, tolerating engines that need a fallback."""
        for locator, name in (
            (self.email_input, "email"),
            (self.password_input, "password"),
        ):
            await self.perform(
                ActionSpec(
                    target=locator,
                    kind=ActionKind.CLEAR,
                    description=f"login: clear {name}",
                )
            )

    async def clear_email(self) -> None:
        await self.email_input.clear()

    async def clear_password(self) -> None:
        await self.password_input.clear()

    async def email_value(self) -> str:
        return await self.email_input.input_value()

    async def password_value(self) -> str:
        return await self.password_input.input_value()

    @allure.step("Click alternative login #{number}")
    async def click_alternative_login(self, number: int) -> None:
        await self.social_login_button(number).click()

    async def has_error_message(self, timeout: int = 2000) -> bool:
        """True if an error/crash message is shown on the page."""
        if self.page.is_closed():
            return False
        return await self.has_text_matching(self.ERROR_TEXT, timeout=timeout)
