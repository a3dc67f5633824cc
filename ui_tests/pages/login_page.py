"""Login page of the demo store."""

from playwright.sync_api import Page

from sheetrunner.browser import actions
from sheetrunner.browser.pages import BasePage
from sheetrunner.reporting.step_log import take_screenshot


class LoginPage(BasePage):

    def __init__(self, page: Page, username: str = "standard_user", password: str = "secret_sauce"):
        super().__init__(page)
        self.username = username
        self.password = password
        self.username_field = page.locator("#user-name")
        self.password_field = page.locator("#password")
        self.login_button = page.locator("#login-button")

    def login_user(self) -> None:
        def _login():
            actions.sync_till(self.page, "visibilityOfElement", self.username_field)
            actions.enter_value(self.page, self.username_field, self.username)
            actions.enter_value(self.page, self.password_field, self.password)
            actions.click_element(self.page, self.login_button)

        self.step(_login, "Login successful", "Login failed")
        take_screenshot(self.page, "PASS", "Logged in")
