"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the Sweet Shop pages.

Each page class encapsulates:
    - Element locators
    - Page-specific actions
    - Verification helpers

Author: Automation Team
License: MIT
================================================================================
"""

from .basket_page import BasketPage, PaymentDetails, ShippingDetails
from .home_page import HomePage
from .login_page import LoginPage
from .product_page import ProductPage

__all__ = [
    "BasketPage",
    "HomePage",
    "LoginPage",
    "PaymentDetails",
    "ProductPage",
    "ShippingDetails",
]
