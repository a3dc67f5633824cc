"""Inventory page shown after login."""

from playwright.sync_api import Page

from sheetrunner.browser import actions
from sheetrunner.browser.pages import BasePage


class Dashboard(BasePage):

    def __init__(self, page: Page):
        super().__init__(page)
        self.add_to_cart_1 = page.locator("#add-to-cart-sauce-labs-backpack")
        self.add_to_cart_2 = page.locator("[name='add-to-cart-sauce-labs-bike-light']")
        self.cart = page.locator("#shopping_cart_container")

    def click_add_to_cart_1(self) -> None:
        self.step(
            lambda: actions.click_element(self.page, self.add_to_cart_1),
            "Added backpack to cart",
            "Could not add backpack to cart",
        )

    def click_add_to_cart_2(self) -> None:
        self.step(
            lambda: actions.click_element(self.page, self.add_to_cart_2),
            "Added bike light to cart",
            "Could not add bike light to cart",
        )

    def click_cart(self) -> None:
        def _open_cart():
            actions.click_element(self.page, self.cart)
            actions.wait_on_page(self.page, 1)

        self.step(_open_cart, "Opened cart", "Could not open cart")
