"""Browser sessions, page objects and page actions."""

from .pages import BasePage
from .session import BrowserSession, SessionRegistry, sessions

__all__ = ["BasePage", "BrowserSession", "SessionRegistry", "sessions"]
